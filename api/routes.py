"""Session API: start a pipeline and read its status."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_service
from api.schemas import ErrorResp, StartReq, StartResp, StatusResp
from services.interview import InterviewService


router = APIRouter(prefix="/pipeline")


@router.post("/start", response_model=StartResp)
def start(req: StartReq, service: InterviewService = Depends(get_service)) -> StartResp:
    pipeline_id = service.machine.start(req.job_title, req.company, req.jd)
    return StartResp(pipeline_id=pipeline_id, pipeline=service.machine.get_status(pipeline_id))


@router.get("/status/{pipeline_id}", response_model=StatusResp, responses={404: {"model": ErrorResp}})
def status(pipeline_id: str, service: InterviewService = Depends(get_service)) -> StatusResp:
    return StatusResp(pipeline=service.machine.get_status(pipeline_id))
