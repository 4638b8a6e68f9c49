"""Coveralls API client.

A single-attempt primitive: one multipart POST of the payload file, no
retries. Failures come in two kinds so operators can tell them apart:

- ProcessingError: the service answered but the answer is not a success
  (error status, ``error: true``, or a body that is not the expected JSON).
- IOFailure: the payload could not be read, or the service could not be
  reached, timed out or dropped the connection mid-transfer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
import structlog

from covreport.config.constants import COVERALLS_URL_DEFAULT, MULTIPART_FIELD
from covreport.core.errors import IOFailure, ProcessingError

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CoverallsResponse:
    """Acknowledgement returned by the jobs endpoint."""

    message: str
    url: str | None = None
    error: bool = False


class CoverallsClient:
    """Submits a payload file to the Coveralls jobs endpoint."""

    def __init__(
        self,
        url: str = COVERALLS_URL_DEFAULT,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def submit(self, coveralls_file: Path) -> CoverallsResponse:
        """Upload the payload and interpret the response.

        Raises:
            ProcessingError: The response is not a success.
            IOFailure: The file or the network operation failed.
        """
        try:
            handle = coveralls_file.open("rb")
        except OSError as e:
            raise IOFailure.file(str(coveralls_file), str(e)) from e

        with handle:
            files = {MULTIPART_FIELD: (coveralls_file.name, handle, "application/json")}
            try:
                with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                    response = client.post(self.url, files=files)
            except httpx.TimeoutException as e:
                raise IOFailure.timeout(self.url, str(e) or type(e).__name__) from e
            except httpx.ConnectError as e:
                raise IOFailure.connect(self.url, str(e) or type(e).__name__) from e
            except httpx.TransportError as e:
                raise IOFailure.transfer(self.url, str(e) or type(e).__name__) from e
            except OSError as e:
                raise IOFailure.file(str(coveralls_file), str(e)) from e

        log.debug("submission_response", status=response.status_code, url=self.url)
        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> CoverallsResponse:
        status_code = response.status_code
        reason = response.reason_phrase
        try:
            data: Any = response.json()
        except ValueError as e:
            raise ProcessingError.invalid_response(status_code, reason, str(e)) from e
        if not isinstance(data, dict):
            raise ProcessingError.invalid_response(
                status_code, reason, f"unexpected response body: {response.text[:200]}"
            )

        message = str(data.get("message") or "")
        error = bool(data.get("error"))
        if error or not response.is_success:
            raise ProcessingError.rejected(status_code, reason, message or response.text[:200])

        url = data.get("url")
        return CoverallsResponse(message=message, url=str(url) if url else None, error=False)
