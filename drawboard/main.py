import logging
import os
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool

from . import __version__
from .collage import compose_collage
from .config import Settings
from .errors import DrawboardError, InvalidInput
from .middleware import BodySizeLimitMiddleware
from .schemas import UploadRequest, UploadResponse
from .storage import save_drawing

logger = logging.getLogger(__name__)


def _error(exc: DrawboardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    os.makedirs(settings.drawings_dir, exist_ok=True)

    app = FastAPI(title="Drawboard", version=__version__)

    @app.middleware("http")
    async def catch_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception(f"Unexpected error on {request.method} {request.url.path}")
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    # Outermost, so 413 and 500 responses keep their CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DrawboardError)
    async def drawboard_error(request: Request, exc: DrawboardError):
        return _error(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error(InvalidInput())

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    @app.post("/upload", response_model=UploadResponse)
    async def upload(payload: Optional[UploadRequest] = None):
        if payload is None:
            raise InvalidInput()
        filename = await run_in_threadpool(save_drawing, payload.image, settings.drawings_dir)
        return UploadResponse(success=True, filename=filename)

    @app.get(
        "/collage",
        response_class=Response,
        responses={200: {"content": {"image/png": {}}}},
    )
    async def collage():
        png = await compose_collage(settings.drawings_dir, settings.cell_size)
        return Response(content=png, media_type="image/png")

    return app


def main():
    load_dotenv()
    settings = Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings)
    logger.info(f"Server running on http://localhost:{settings.port} (drawings in {settings.drawings_dir})")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
