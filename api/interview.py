"""Application routes that drive questions, answers and analysis for a session."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_service
from api.schemas import (
    AnalysisReq,
    AnswerReq,
    ErrorResp,
    EvaluationResp,
    NextQuestionResp,
    QuestionResp,
    ResultsResp,
    SessionStartResp,
    StartReq,
    StatusResp,
    ToneReq,
    ToneResp,
)
from contracts import AnalysisSummary, EvaluationResult
from services.interview import InterviewService


router = APIRouter(
    prefix="/api/interview",
    responses={404: {"model": ErrorResp}, 502: {"model": ErrorResp}},
)


@router.post("/session/start", response_model=SessionStartResp)
def start_session(req: StartReq, service: InterviewService = Depends(get_service)) -> SessionStartResp:
    pipeline_id = service.machine.start(req.job_title, req.company, req.jd)
    return SessionStartResp(
        session_id=pipeline_id,
        pipeline_id=pipeline_id,
        pipeline=service.machine.get_status(pipeline_id),
    )


@router.post("/session/{session_id}/question", response_model=QuestionResp)
def next_question(session_id: str, service: InterviewService = Depends(get_service)) -> QuestionResp:
    question = service.next_question(session_id)
    return QuestionResp(session_id=session_id, question=question)


@router.get("/session/{session_id}/next-question", response_model=NextQuestionResp)
def fetch_next_question(session_id: str, service: InterviewService = Depends(get_service)) -> NextQuestionResp:
    question = service.next_question(session_id)
    return NextQuestionResp(
        session_id=session_id,
        question_id=question.id,
        question=question.questionText,
        scorecard=question.scorecard,
    )


@router.post("/session/{session_id}/answer", response_model=EvaluationResp)
def submit_answer(
    session_id: str,
    req: AnswerReq,
    service: InterviewService = Depends(get_service),
) -> EvaluationResp:
    result = service.submit_answer(session_id, req.question_id, req.transcript)
    return EvaluationResp(session_id=session_id, question_id=req.question_id, analysis=result)


@router.post("/session/{session_id}/tone", response_model=ToneResp)
def analyze_tone(
    session_id: str,
    req: ToneReq,
    service: InterviewService = Depends(get_service),
) -> ToneResp:
    result = service.analyze_tone(session_id, req.question_id, req.transcript, req.metrics)
    return ToneResp(session_id=session_id, question_id=req.question_id, tone=result)


@router.post("/analysis", response_model=EvaluationResult)
def analyze_answer(req: AnalysisReq, service: InterviewService = Depends(get_service)) -> EvaluationResult:
    return service.submit_answer(req.session_id, req.question_id, req.transcript)


@router.post("/session/{session_id}/complete", response_model=StatusResp)
def complete_session(session_id: str, service: InterviewService = Depends(get_service)) -> StatusResp:
    return StatusResp(pipeline=service.complete(session_id))


@router.get("/session/{session_id}/results", response_model=ResultsResp)
def session_results(session_id: str, service: InterviewService = Depends(get_service)) -> ResultsResp:
    return ResultsResp(session_id=session_id, items=service.results(session_id))


@router.get("/session/{session_id}/analysis", response_model=AnalysisSummary)
def session_analysis(session_id: str, service: InterviewService = Depends(get_service)) -> AnalysisSummary:
    return service.analysis(session_id)
