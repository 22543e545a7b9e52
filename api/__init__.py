"""HTTP routers for the pipeline service."""
from .errors import install_error_handlers
from .interview import router as interview_router
from .routes import router as pipeline_router

__all__ = ["install_error_handlers", "interview_router", "pipeline_router"]
