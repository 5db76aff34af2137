import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# FastAPI imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local imports
from src.backend.benefits.api.router import app_benefits
from src.backend.benefits.config.settings import (
    BenefitsSettings,
    build_contracts,
)
from src.backend.benefits.use_cases.admin import BlockHeightSource

load_dotenv(override=False)

# Configure logging levels from environment variables
logging.basicConfig(
    level=getattr(logging, os.environ.get("BENEFITS_LOGGING_LEVEL", "INFO").upper(), logging.INFO)
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage FastAPI application lifecycle - startup and shutdown."""
    logger = logging.getLogger(__name__)

    # Startup
    settings = app.state.settings
    logger.info(
        "🚀 Starting benefit rules backend (policy=%s, admin=%s, height=%s)",
        settings.policy_path or "built-in defaults",
        settings.admin,
        app.state.contracts.height_source.current_height(),
    )
    yield

    # Shutdown
    logger.info("🛑 Benefit rules backend shutdown complete")


def create_app(
    settings: BenefitsSettings | None = None,
    height_source: BlockHeightSource | None = None,
) -> FastAPI:
    """Build the FastAPI app with fresh in-memory contract state."""

    settings = settings or BenefitsSettings.from_env()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.contracts = build_contracts(settings, height_source=height_source)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allow all origins for development; restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(app_benefits)
    return app


app = create_app()


# Run the app
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.backend.app:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info",
        access_log=False,
    )
