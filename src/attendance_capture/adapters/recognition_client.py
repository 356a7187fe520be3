"""Recognition service client."""

from dataclasses import dataclass

import httpx

from attendance_capture.errors import UploadTransportError
from attendance_capture.services.uploads import (
    FilePart,
    RawResponse,
    RecognitionClient,
)


@dataclass
class HttpxRecognitionClient(RecognitionClient):
    """Recognition client implemented with httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxRecognitionClient":
        """Create a recognition client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def post_multipart(
        self,
        url: str,
        *,
        fields: dict[str, str],
        files: dict[str, FilePart],
        token: str | None,
        timeout: float,
    ) -> RawResponse:
        """POST a multipart form and return the raw reply."""
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self.http_client.post(
                url,
                data=fields,
                files=files,
                headers=headers,
                timeout=timeout,
            )
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise UploadTransportError(f"{type(exc).__name__}: {exc}") from exc
        return RawResponse(status_code=response.status_code, body=response.content)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
