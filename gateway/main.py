from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.config import GatewaySettings
from common.errors import TranscriptionError
from common.schemas import ErrorResponse, TranscribeRequest, TranscribeResponse
from gateway.transcriber import TranscriptionGateway

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


def create_app(gateway: Optional[TranscriptionGateway] = None) -> FastAPI:
    app = FastAPI(title="Speech Diarization Gateway")
    app.state.gateway = gateway or TranscriptionGateway(GatewaySettings())

    @app.exception_handler(TranscriptionError)
    async def transcription_error(request: Request, exc: TranscriptionError):
        if exc.status_code < 500:
            logger.warning("Rejected %s: %s", request.url.path, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.warning("Invalid body on %s: %s", request.url.path, exc.errors())
        return _error(400, "Request body must be a JSON object with audioContent")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/transcribe")
    @app.post("/api/transcribe")
    def transcribe(body: TranscribeRequest, request: Request):
        # Sync handler: FastAPI runs the blocking engine call in its threadpool.
        words = request.app.state.gateway.transcribe(body.audio_content)
        return TranscribeResponse(transcription_data=words).model_dump(by_alias=True)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    settings = app.state.gateway.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
