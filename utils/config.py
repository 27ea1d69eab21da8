import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from utils.errors import ConfigurationError


load_dotenv(override=True)


DEFAULT_LOCATION = "us-central1"
DEFAULT_MODEL_ID = "gemini-1.5-flash-002"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:8080,http://localhost:5500"


class VertexSettings(BaseModel):
    project_id: str
    credentials_path: Optional[str] = None
    location: str = DEFAULT_LOCATION
    model_id: str = DEFAULT_MODEL_ID
    timeout_seconds: Optional[float] = None

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self.location}-aiplatform.googleapis.com/v1/projects/{self.project_id}"
            f"/locations/{self.location}/publishers/google/models/{self.model_id}:generateContent"
        )

    @classmethod
    def from_env(cls, require_credentials: bool = True) -> "VertexSettings":
        """
        Reads the Vertex AI settings from the environment.

        Called on every model invocation so that a missing value fails the
        request that needed it instead of the process start-up.
        """
        project_id = os.getenv("GOOGLE_CLOUD_PROJECT")
        if not project_id:
            raise ConfigurationError("GOOGLE_CLOUD_PROJECT environment variable is not set")

        credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        if require_credentials and not credentials_path:
            raise ConfigurationError("GOOGLE_APPLICATION_CREDENTIALS environment variable is not set")

        timeout = os.getenv("VERTEX_TIMEOUT_SECONDS")
        return cls(
            project_id=project_id,
            credentials_path=credentials_path,
            location=os.getenv("GOOGLE_CLOUD_LOCATION") or DEFAULT_LOCATION,
            model_id=os.getenv("VERTEX_MODEL_ID") or DEFAULT_MODEL_ID,
            timeout_seconds=float(timeout) if timeout else None,
        )


class AppConfig:
    """Process-level settings read once at start-up"""

    SUMMARIZER_MIN_INTERVAL_MS = int(os.getenv("SUMMARIZER_MIN_INTERVAL_MS", "1000"))
    SUMMARIZER_UPSTREAM_RETRY_AFTER_MS = int(os.getenv("SUMMARIZER_UPSTREAM_RETRY_AFTER_MS", "5000"))
    SUMMARIZER_MAX_TEXT_LENGTH = 10000

    LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    PORT = int(os.getenv("PORT", "8000"))

    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
        if origin.strip()
    ]

