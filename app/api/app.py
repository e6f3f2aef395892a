from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.responses import error_response
from app.api.routes import health, router
from app.config.settings import Settings
from app.documents.exceptions import NotFoundError, ValidationError
from app.documents.orchestrator import DocumentOrchestrator
from app.logging.logger import Log
from app.worker.dispatcher import OCRJobDispatcher


def create_app(
    settings: Settings,
    orchestrator: DocumentOrchestrator,
    dispatcher: OCRJobDispatcher | None = None,
) -> FastAPI:
    """Build the HTTP app. Document routes are mounted under settings.api_prefix."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if dispatcher is not None:
            dispatcher.shutdown(wait=True)

    app = FastAPI(title="PDF OCR Document Service", version="0.1.0", lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.include_router(router, prefix=settings.api_prefix)
    app.add_api_route("/health", health, methods=["GET"])
    _register_exception_handlers(app)
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        Log.warning("Request rejected", path=request.url.path, error=exc)
        return error_response(str(exc), 400)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        Log.warning("Malformed request", path=request.url.path)
        return error_response("Invalid request", 400)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return error_response(str(exc), 404)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        Log.error(
            "Unhandled error",
            path=request.url.path,
            error_type=exc.__class__.__name__,
            error=exc,
        )
        return error_response(str(exc) or "Internal server error", 500)
