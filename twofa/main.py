from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from twofa.api.v1.auth import router as auth_router
from twofa.core.config import settings
from twofa.core.logging import setup_logging


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title=f"{settings.APP_NAME} Auth API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
