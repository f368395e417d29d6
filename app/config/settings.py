# app/config/settings.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVIDENCE_",
        env_file=".env",            # lee automáticamente el .env en la raíz
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="evidence-slot-service",
        description="Service name for FastAPI.",
    )
    log_level: str = Field(
        default="INFO",
        description="Nivel de log (DEBUG, INFO, WARNING, ERROR); app.logger lo lee de EVIDENCE_LOG_LEVEL.",
    )

    # Política de calidad
    strict_quality_check: bool = Field(
        default=False,
        description=(
            "Si es True, un documento sin quality check se trata como 'issue'. "
            "Por defecto se considera aprobado."
        ),
    )

    default_visa_type: str = Field(
        default="naturalisation",
        description="Tipo de visa usado cuando el request no especifica uno.",
    )


def get_settings() -> Settings:
    return Settings()
