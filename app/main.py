"""FastAPI application entry point."""
import uvicorn
from fastapi import FastAPI

from app.config import get_settings
from app.logging_config import configure_logging
from app.routers import analysis, health


configure_logging()

app = FastAPI(title="Physique Coach API")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(health.router)
app.include_router(analysis.router)


def run() -> None:
    """Serve the API with the configured host and port; ``DEBUG=true`` enables reload."""
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
