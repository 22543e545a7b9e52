"""Pydantic schemas for the pipeline and interview HTTP API."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from contracts import EvaluationResult, Question, QuestionScorecard, ToneMetrics, ToneResult
from pipeline import Pipeline
from services.interview import ResultItem


class StartReq(BaseModel):
    job_title: str
    company: str = ""
    jd: str


class StartResp(BaseModel):
    pipeline_id: str
    pipeline: Pipeline


class SessionStartResp(StartResp):
    session_id: str


class StatusResp(BaseModel):
    pipeline: Pipeline


class AnswerReq(BaseModel):
    question_id: str
    transcript: str


class ToneReq(BaseModel):
    question_id: str
    transcript: str
    metrics: ToneMetrics = Field(default_factory=ToneMetrics)


class AnalysisReq(BaseModel):
    session_id: str
    question_id: str
    transcript: str


class NextQuestionResp(BaseModel):  # Flat question shape read by the practice client
    session_id: str
    question_id: str
    question: str
    scorecard: QuestionScorecard


class QuestionResp(BaseModel):
    session_id: str
    question: Question


class EvaluationResp(BaseModel):
    session_id: str
    question_id: str
    analysis: EvaluationResult


class ToneResp(BaseModel):
    session_id: str
    question_id: str
    tone: ToneResult


class ResultsResp(BaseModel):
    session_id: str
    items: List[ResultItem] = Field(default_factory=list)


class ErrorResp(BaseModel):
    error: str
