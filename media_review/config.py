"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed application configuration."""

    gcp_project: str = Field(
        default="partner-techie24lon-6022", alias="GOOGLE_CLOUD_PROJECT"
    )
    gcp_location: str = Field(default="europe-west1", alias="GOOGLE_CLOUD_LOCATION")
    vertex_model: str = Field(default="gemini-1.5-flash-002", alias="VERTEX_MODEL")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", alias="LOG_LEVEL"
    )
    port: int = Field(default=8000, alias="PORT")
    max_body_size: int = Field(
        default=20 * 1024 * 1024, alias="MAX_BODY_SIZE", description="Bytes"
    )
    model_timeout: float = Field(
        default=120.0, alias="MODEL_TIMEOUT", description="Seconds"
    )

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @property
    def vertex_endpoint(self) -> str:
        """Regional Vertex AI endpoint for the configured publisher model."""

        return (
            f"https://{self.gcp_location}-aiplatform.googleapis.com/v1"
            f"/projects/{self.gcp_project}/locations/{self.gcp_location}"
            f"/publishers/google/models/{self.vertex_model}"
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of settings."""

    return Settings()
