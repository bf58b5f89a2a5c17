import uvicorn
from fastapi import FastAPI

from referral_engine.api.routes.health import router as health_router
from referral_engine.api.routes.internal_referrals import router as internal_referrals_router
from referral_engine.api.routes.referrals import router as referrals_router
from referral_engine.core.config import get_settings
from referral_engine.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.app_env != "dev")

    app = FastAPI(
        title="Referral & Reward Engine API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health_router)
    app.include_router(referrals_router)
    app.include_router(internal_referrals_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "referral_engine.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
