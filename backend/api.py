"""FastAPI app for the /chat inference proxy."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config, create_completion_adapter, get_config
from domain.errors import UpstreamError
from models import ChatRequest, ChatResponse, ErrorResponse, HealthResponse
from ports.completion import CompletionPort
from use_cases.chat import ChatReplyUseCase

logger = logging.getLogger(__name__)

SERVER_ERROR = "Erreur côté serveur"


def create_app(
    cfg: Optional[Config] = None,
    completion: Optional[CompletionPort] = None,
) -> FastAPI:
    cfg = cfg or get_config()
    completion = completion or create_completion_adapter(cfg)
    use_case = ChatReplyUseCase(completion)

    app = FastAPI(title="French Buddy Chat")

    # The browser front end is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request, exc: UpstreamError):
        logger.error(f"Chat API error: {exc}")
        return JSONResponse(status_code=500, content=ErrorResponse(error=SERVER_ERROR).model_dump())

    @app.post("/chat", response_model=ChatResponse, responses={500: {"model": ErrorResponse}})
    async def chat(req: ChatRequest) -> ChatResponse:
        return await use_case.execute(req)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(model=completion.model_name(), config=cfg.as_dict())

    return app
