"""Aggregation engine and the interview request flow."""
from .aggregation import aggregate, evaluation_results, summarize_pipeline
from .interview import InterviewService, ResultItem

__all__ = ["aggregate", "evaluation_results", "summarize_pipeline", "InterviewService", "ResultItem"]
