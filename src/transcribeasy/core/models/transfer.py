import os
import threading
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Optional, Tuple

import requests

from ...utils.logger import get_logger
from ..settings.config import (
    CONNECT_TIMEOUT_S,
    DOWNLOAD_CHUNK_SIZE,
    PROGRESS_UPDATE_INTERVAL_MS,
    READ_TIMEOUT_S,
)
from .catalog import PARTIAL_SUFFIX, get_model_by_id
from .throttle import ProgressThrottle

ProgressCallback = Callable[[int], None]


class CancellationToken:
    """Cooperative cancellation flag shared between the manager and one transfer."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class TransferOutcome(Enum):
    COMPLETED = auto()
    CANCELLED = auto()
    FAILED = auto()


@dataclass
class TransferResult:
    outcome: TransferOutcome
    bytes_received: int = 0
    total_bytes: int = 0
    error: Optional[str] = None


def _content_length(headers) -> int:
    try:
        value = int(headers.get("content-length", 0))
    except (TypeError, ValueError):
        return 0
    return max(value, 0)


class TransferController:
    """
    Executes a single download attempt of one catalog model.

    The body is streamed into ``<destination>.part`` and renamed onto the
    destination once every byte is on disk. The controller never raises for
    network or disk problems and never retries; ``run`` reports exactly one
    ``TransferResult``. A cancelled attempt leaves its partial file behind
    for the caller to clean up.

    Example:
        token = CancellationToken()
        controller = TransferController("base", path, token, on_progress=print)
        result = controller.run()
    """

    def __init__(
        self,
        model_id: str,
        destination: Path,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback] = None,
        session=None,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
        timeout: Tuple[float, float] = (CONNECT_TIMEOUT_S, READ_TIMEOUT_S),
        throttle: Optional[ProgressThrottle] = None,
    ):
        """
        Args:
            model_id: Catalog identifier of the model to fetch
            destination: Final path of the model file
            token: Checked before every read; set it to stop the transfer
            on_progress: Called with the integer percentage (0-100), rate limited
            session: Object with a requests-compatible ``get``; defaults to requests
            chunk_size: Bytes requested per read
            timeout: (connect, read) timeout in seconds
            throttle: Rate limiter for ``on_progress``
        """
        self.model_id = model_id
        self.destination = Path(destination)
        self.partial_path = self.destination.with_name(
            self.destination.name + PARTIAL_SUFFIX
        )
        self._token = token
        self._on_progress = on_progress
        self._http = session if session is not None else requests
        self._chunk_size = chunk_size
        self._timeout = timeout
        self._throttle = throttle or ProgressThrottle(PROGRESS_UPDATE_INTERVAL_MS)

        self._received = 0
        self._total = 0
        self._percent = 0
        self._reported = -1
        self._logger = get_logger(__name__)

    @property
    def percent(self) -> int:
        """Percentage computed from bytes on disk; only grows within an attempt."""
        return self._percent

    def run(self) -> TransferResult:
        model = get_model_by_id(self.model_id)
        if model is None:
            return self._failed(f"Unknown model: {self.model_id}")
        if not model.has_source:
            return self._failed(f"No download URL configured for '{self.model_id}'")

        try:
            self.destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return self._failed(f"Could not create {self.destination.parent}: {e}")

        self._logger.info(f"Downloading model {self.model_id} from {model.url}")

        try:
            response = self._http.get(model.url, stream=True, timeout=self._timeout)
        except requests.RequestException as e:
            return self._failed(f"Request failed: {e}")

        try:
            return self._stream(response)
        except requests.RequestException as e:
            return self._failed(f"Transfer interrupted: {e}")
        except OSError as e:
            return self._failed(f"Could not write {self.partial_path}: {e}")
        finally:
            response.close()

    def _stream(self, response) -> TransferResult:
        if not 200 <= response.status_code < 300:
            return self._failed(f"Server responded with HTTP {response.status_code}")

        self._total = _content_length(response.headers)
        chunks = iter(response.iter_content(chunk_size=self._chunk_size))

        with open(self.partial_path, "wb") as f:
            while True:
                if self._token.cancelled:
                    return self._cancelled()

                chunk = next(chunks, None)
                if chunk is None:
                    break
                if not chunk:
                    continue

                f.write(chunk)
                self._received += len(chunk)
                self._update_progress()

            f.flush()
            os.fsync(f.fileno())

        if self._received == 0:
            return self._failed("Response body was empty")
        if self._total and self._received < self._total:
            return self._failed(
                f"Stream ended early ({self._received} of {self._total} bytes)"
            )

        # The stream may have ended right as a cancel arrived
        if self._token.cancelled:
            return self._cancelled()

        os.replace(self.partial_path, self.destination)

        self._percent = 100
        if self._total:
            self._report(force=True)
        self._logger.info(
            f"Model {self.model_id} saved to {self.destination} "
            f"({self._received} bytes)"
        )
        return TransferResult(
            TransferOutcome.COMPLETED, self._received, self._total
        )

    def _update_progress(self) -> None:
        if self._total <= 0:
            return
        percent = min(100, self._received * 100 // self._total)
        if percent > self._percent:
            self._percent = percent
            self._report()

    def _report(self, force: bool = False) -> None:
        if self._on_progress is None or self._percent == self._reported:
            return
        if force:
            self._throttle.force()
        elif not self._throttle.ready():
            return
        self._reported = self._percent
        self._on_progress(self._percent)

    def _cancelled(self) -> TransferResult:
        self._logger.info(
            f"Download of {self.model_id} cancelled after {self._received} bytes"
        )
        return TransferResult(
            TransferOutcome.CANCELLED, self._received, self._total
        )

    def _failed(self, message: str) -> TransferResult:
        self._logger.debug(f"Transfer of {self.model_id} failed: {message}")
        return TransferResult(
            TransferOutcome.FAILED, self._received, self._total, error=message
        )
