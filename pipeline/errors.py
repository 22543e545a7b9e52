"""Error taxonomy surfaced by the pipeline core.

Every error carries a stable machine ``code`` and an HTTP-style ``status`` so
the request layer can render ``{"error": code}`` without inspecting types.
"""
from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """Base class for failures the caller is expected to distinguish."""

    code = "pipeline_error"
    status = 500

    def __init__(self, message: str = "", **details: Any) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details = details


class ValidationError(PipelineError):
    """Malformed caller input; nothing was mutated."""

    code = "invalid_request"
    status = 400


class NotFoundError(PipelineError):
    """No pipeline (or question) exists under the requested id."""

    code = "not_found"
    status = 404


class ContractViolationError(PipelineError):
    """The model reply failed schema validation."""

    code = "contract_violation"
    status = 502


class StoreError(PipelineError):
    """The durable store could not be read or written."""

    code = "store_unavailable"
    status = 503


class UpstreamError(PipelineError):
    """The model or transcription collaborator failed or timed out."""

    code = "upstream_error"
    status = 502


__all__ = [
    "PipelineError",
    "ValidationError",
    "NotFoundError",
    "ContractViolationError",
    "StoreError",
    "UpstreamError",
]
