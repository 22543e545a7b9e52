from __future__ import annotations  # FastAPI server exposing the interview pipeline

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import install_error_handlers, interview_router, pipeline_router
from config import MODEL_KEYS, bind_model, load_config, resolve_registry
from config.settings import settings
from llm_gateway import HttpClient, invoker


logger = logging.getLogger(__name__)


def bind_models_from_config(config_path: Path, *, client: Optional[HttpClient] = None) -> bool:  # Bind gateway invokers for every model task
    if not config_path.exists():
        logger.warning("LLM routing config not found at %s; model tasks stay unbound", config_path)
        return False
    routes = resolve_registry(load_config(config_path), list(MODEL_KEYS))
    for key, route in routes.items():
        bind_model(key, invoker(route, client=client))
        logger.info("Bound %s to route=%s model=%s", key, route.name, route.model)
    return True


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    bind_models_from_config(Path(settings.LLM_CONFIG_PATH))
    yield


def create_app() -> FastAPI:
    application = FastAPI(title="Interview Pipeline API", lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(application)
    application.include_router(pipeline_router)
    application.include_router(interview_router)
    return application


app = create_app()
