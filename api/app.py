"""
api/app.py
FastAPI application entry point.
Run with:  uvicorn api.app:app --port 8000
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import settings
from monitoring import get_logger

log = get_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=(
            "Vessel–cargo matching for dry-bulk chartering. "
            "Extracts requirements from charter messages, retrieves the best "
            "compatible vessel listings and ranks listing pools by weighted preferences."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def _global_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error("Unhandled error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "detail": str(exc)},
        )

    from api.routes import router
    app.include_router(router, prefix="/api/v1", tags=["Matching"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.app:app", host=settings.api_host, port=settings.api_port, log_level="info")
