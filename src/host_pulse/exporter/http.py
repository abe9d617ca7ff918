"""HTTP reporter – POSTs each encoded snapshot to the collector."""

from __future__ import annotations

import logging

import requests

from ..config import ReporterConfig
from ..encoder import CONTENT_TYPE, encode
from ..snapshot import Snapshot
from .base import BaseExporter

logger = logging.getLogger(__name__)


class SendError(Exception):
    """Raised when a payload could not be delivered.

    ``status_code`` is set when the collector answered with a non-2xx
    status and ``None`` for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpReporter(BaseExporter):
    """Sends snapshots to the configured endpoint, one POST per cycle.

    There is no retry and no queue: a failed send is logged and the
    snapshot is dropped. The next cycle is unaffected.
    """

    def __init__(self, config: ReporterConfig, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._headers = dict(config.headers or {})
        self._headers["Content-Type"] = CONTENT_TYPE
        self.sent = 0
        self.failed = 0
        logger.info("HttpReporter initialized → %s", config.endpoint)

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    def send(self, payload: bytes) -> int:
        """POST *payload* and return the status code.

        Raises :class:`SendError` on a transport error or a non-2xx answer.
        """
        try:
            response = self._session.post(
                self._config.endpoint,
                data=payload,
                headers=self._headers,
                timeout=self._config.timeout_seconds,
                verify=self._config.verify_tls,
            )
        except requests.RequestException as exc:
            raise SendError(f"POST {self._config.endpoint} failed: {exc}") from exc

        # The response body carries no contract; release the connection.
        response.close()
        if not 200 <= response.status_code < 300:
            raise SendError(
                f"POST {self._config.endpoint} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response.status_code

    def export(self, snapshot: Snapshot) -> None:
        payload = encode(snapshot)
        try:
            status = self.send(payload)
        except SendError as exc:
            self.failed += 1
            logger.warning("Send failed (%d so far): %s", self.failed, exc)
            return
        self.sent += 1
        logger.debug("Sent %d bytes → %s (%d)", len(payload), self._config.endpoint, status)

    def shutdown(self) -> None:
        self._session.close()
        logger.info("HttpReporter shut down (sent=%d, failed=%d)", self.sent, self.failed)
