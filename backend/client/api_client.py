"""
API Client - requests based client for the voice recorder backend
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds


class ApiError(Exception):
    """Non-2xx response from the backend"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ApiClient:
    """
    Thin wrapper around the HTTP API.

    Keeps the bearer token after register/login and unwraps the
    ``{success, message, data}`` envelope. Any ``requests.Session``-like
    object can be passed as ``session``.
    """

    def __init__(self, base_url: str = "http://localhost:8000", session=None,
                 token: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token = token
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _send(self, method: str, path: str, **kwargs):
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs
        )

        if response.status_code == 401:
            # Token is invalid or expired; the caller must log in again
            self.token = None

        if response.status_code >= 400:
            try:
                message = response.json().get("message") or response.text
            except ValueError:
                message = response.text
            logger.warning("%s %s failed: %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)

        return response

    def _request(self, method: str, path: str, **kwargs) -> Any:
        return self._send(method, path, **kwargs).json().get("data")

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def register(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/register", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    def logout(self) -> None:
        """Tokens are stateless: logging out only forgets the token."""
        self.token = None

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/profile")["user"]

    def refresh_token(self) -> str:
        self.token = self._request("POST", "/auth/refresh-token")["token"]
        return self.token

    # ------------------------------------------------------------------
    # Recordings
    # ------------------------------------------------------------------

    def create_recording(self, name: Optional[str] = None, format: Optional[str] = None) -> Dict[str, Any]:
        payload = {}
        if name is not None:
            payload["name"] = name
        if format is not None:
            payload["format"] = format
        return self._request("POST", "/recordings", json=payload)

    def upload_chunk(self, recording_id: str, audio: bytes, chunk_index: int = 0,
                     is_last_chunk: bool = False, mime_type: str = "audio/webm",
                     filename: str = "recording.webm") -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/recordings/{recording_id}/chunks",
            files={"audio": (filename, audio, mime_type)},
            data={"chunkIndex": str(chunk_index), "isLastChunk": str(is_last_chunk).lower()},
        )

    def get_recordings(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/recordings")

    def get_recording(self, recording_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/recordings/{recording_id}")

    def complete_recording(self, recording_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/recordings/{recording_id}/complete")

    def cancel_recording(self, recording_id: str) -> str:
        return self._send("POST", f"/recordings/{recording_id}/cancel").json()["message"]

    def delete_recording(self, recording_id: str) -> str:
        return self._send("DELETE", f"/recordings/{recording_id}").json()["message"]

    def stream_recording(self, recording_id: str) -> Tuple[bytes, str]:
        """Download the playable audio and its content type."""
        response = self._send("GET", f"/recordings/{recording_id}/stream")
        return response.content, response.headers.get("Content-Type", "audio/webm")
