from fastapi import FastAPI

from app.api.routes import router as evidence_router
from app.config.settings import Settings
from app.services.visa_catalogs import load_all_catalogs


def create_app() -> FastAPI:
    settings = Settings()
    # Valida los catálogos al arrancar: un ciclo de dependencias falla aquí y no en runtime
    load_all_catalogs()

    app = FastAPI(title=settings.app_name)
    app.include_router(evidence_router)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "service": settings.app_name}

    return app


app = create_app()
