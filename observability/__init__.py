"""Observability utilities for the pipeline orchestration stack."""
from .logger import log_event
from .tracing import timed

__all__ = ["log_event", "timed"]
