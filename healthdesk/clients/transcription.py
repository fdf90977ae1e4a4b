"""Speech-to-text through a Whisper-compatible transcription endpoint (Groq by default)."""

import logging

import httpx

from healthdesk.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Posts audio to an OpenAI-style ``/audio/transcriptions`` endpoint."""

    def __init__(
        self,
        api_key: str,
        url: str,
        model: str,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.model = model
        self.http = httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0))

    async def transcribe(self, filename: str, audio: bytes, content_type: str) -> str:
        """Transcribe English speech to text.

        Raises UpstreamFailure when the provider is unreachable, times out,
        rejects the request or answers with something other than JSON.
        """
        try:
            resp = await self.http.post(
                self.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                data={
                    "model": self.model,
                    "language": "en",
                    "temperature": "0",
                    "response_format": "json",
                },
                files={"file": (filename, audio, content_type or "application/octet-stream")},
            )
        except httpx.TimeoutException as e:
            logger.warning("Transcription provider timed out")
            raise UpstreamFailure("Transcription provider timed out.") from e
        except httpx.HTTPError as e:
            logger.warning("Transcription provider unreachable: %s", e)
            raise UpstreamFailure("Failed to reach transcription provider.") from e

        if resp.status_code >= 400:
            logger.warning("Transcription failed: %s %s", resp.status_code, resp.text[:200])
            raise UpstreamFailure(f"Transcription failed with status {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamFailure("Transcription provider returned invalid JSON.") from e
        if not isinstance(payload, dict):
            raise UpstreamFailure("Transcription provider returned an unexpected response.")
        return str(payload.get("text") or "").strip()

    async def close(self) -> None:
        await self.http.aclose()
