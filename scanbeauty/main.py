import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scanbeauty import __version__
from scanbeauty.api import router as api_router
from scanbeauty.config import get_settings
from scanbeauty.dashboard import router as dashboard_router
from scanbeauty.errors import GENERIC_ERROR, log_error

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="ScanBeauty", version=__version__)

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(dashboard_router, prefix="/admin")

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        log_error(exc, f"{request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "ScanBeauty"}

    logger.info(f"ScanBeauty {__version__} ready")
    return app


app = create_app()
