import asyncio
import logging
from typing import Optional, Protocol

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from utils.config import VertexSettings
from utils.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class TokenProvider(Protocol):
    def get_token(self) -> str:
        ...


class ModelClient(Protocol):
    async def generate(self, prompt: str) -> str:
        ...


class StaticTokenProvider:
    """Hands out a token obtained elsewhere (gcloud, a secret store, tests)."""

    def __init__(self, token: str):
        if not token:
            raise ConfigurationError("Access token must not be empty")
        self.token = token

    def get_token(self) -> str:
        return self.token


class ServiceAccountTokenProvider:
    """Mints OAuth access tokens from a service-account JSON key file."""

    def __init__(self, credentials_path: str):
        self.credentials_path = credentials_path
        self._credentials = None

    def get_token(self) -> str:
        try:
            if self._credentials is None:
                self._credentials = service_account.Credentials.from_service_account_file(
                    self.credentials_path, scopes=[CLOUD_PLATFORM_SCOPE]
                )
            if not self._credentials.valid:
                self._credentials.refresh(GoogleAuthRequest())
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Could not load service account credentials from {self.credentials_path}: {e}"
            ) from e
        except GoogleAuthError as e:
            raise UpstreamError(f"Failed to obtain access token: {e}") from e
        return self._credentials.token


class VertexAIClient:
    def __init__(
        self,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Single-shot client for the Vertex AI ``generateContent`` endpoint.

        Args:
            token_provider: Source of bearer tokens. When omitted, a service
                account provider is built from GOOGLE_APPLICATION_CREDENTIALS
                on first use.
            transport: Optional httpx transport, used by tests.
        """
        self.token_provider = token_provider
        self.transport = transport
        self._service_account: Optional[ServiceAccountTokenProvider] = None

    def _default_provider(self, credentials_path: str) -> ServiceAccountTokenProvider:
        if self._service_account is None or self._service_account.credentials_path != credentials_path:
            self._service_account = ServiceAccountTokenProvider(credentials_path)
        return self._service_account

    @staticmethod
    def build_payload(prompt: str) -> dict:
        return {
            "contents": {
                "role": "user",
                "parts": [{"text": prompt}],
            }
        }

    @staticmethod
    def extract_text(data: dict) -> str:
        """Return the first text part of the first candidate."""
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates:
            raise UpstreamError("No response generated from Vertex AI")

        candidate = candidates[0] if isinstance(candidates, list) else None
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        part = parts[0] if isinstance(parts, list) and parts else None
        text = part.get("text") if isinstance(part, dict) else None
        if not isinstance(text, str) or not text:
            raise UpstreamError("Invalid response format from Vertex AI")

        return text

    async def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the generated text.

        Raises:
            ConfigurationError: project or credentials are not configured.
            UpstreamError: non-success status or no usable candidate.
        """
        if self.token_provider is not None:
            settings = VertexSettings.from_env(require_credentials=False)
            provider = self.token_provider
        else:
            settings = VertexSettings.from_env()
            provider = self._default_provider(settings.credentials_path)

        # google-auth refreshes over blocking HTTP
        access_token = await asyncio.to_thread(provider.get_token)

        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

        logger.info("Calling Vertex AI model %s in %s", settings.model_id, settings.location)
        try:
            async with httpx.AsyncClient(timeout=settings.timeout_seconds, transport=self.transport) as client:
                resp = await client.post(settings.endpoint, json=self.build_payload(prompt), headers=headers)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Vertex AI request failed: {e}") from e

        if not resp.is_success:
            raise UpstreamError(
                f"Vertex AI API error: {resp.status_code} {resp.text}",
                upstream_status=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError("Vertex AI returned a non-JSON body") from e

        return self.extract_text(data)
