"""Shared Vertex AI REST plumbing for the Imagen and Gemini TTS clients."""

import logging
from typing import Optional

import google.auth
import google.auth.transport.requests
import requests

from ..config import config
from ..errors import ConfigError, ProviderError, RateLimited

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


class VertexClient:
    """Authenticated POSTs against Vertex AI publisher model endpoints."""

    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._project_id = project_id or config.google_cloud_project
        self._location = location or config.google_cloud_location
        self._timeout = timeout
        self._session = session or requests.Session()
        self._credentials = None

        if not self._project_id:
            raise ConfigError("GOOGLE_CLOUD_PROJECT not set", code="missing_config")

    @property
    def project_id(self) -> str:
        return self._project_id

    def _token(self) -> str:
        if self._credentials is None:
            self._credentials, _ = google.auth.default(scopes=SCOPES)
        if not self._credentials.valid:
            self._credentials.refresh(google.auth.transport.requests.Request())
        return self._credentials.token

    def _endpoint(self, model: str, method: str) -> str:
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/"
            f"projects/{self._project_id}/locations/{self._location}/"
            f"publishers/google/models/{model}:{method}"
        )

    def _post(self, model: str, method: str, body: dict) -> dict:
        """POST ``body`` to a model endpoint and return the decoded JSON.

        Raises:
            RateLimited: On HTTP 429 or a quota error.
            ProviderError: On any other failure.
        """
        headers = {
            "Authorization": f"Bearer {self._token()}",
            "Content-Type": "application/json",
        }

        try:
            response = self._session.post(
                self._endpoint(model, method),
                json=body,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"Vertex AI request failed: {e}", code="connection") from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimited(
                f"429: {response.text[:500]}",
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        if response.status_code != 200:
            error_msg = f"{response.status_code}: {response.text[:500]}"
            logger.error(f"Vertex AI error: {error_msg}")
            if "RESOURCE_EXHAUSTED" in response.text:
                raise RateLimited(error_msg, status_code=response.status_code)
            raise ProviderError(error_msg, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Invalid JSON from Vertex AI: {e}") from e
