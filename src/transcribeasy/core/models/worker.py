from pathlib import Path
from typing import Optional

from PySide6.QtCore import QThread, Signal

from ...utils.logger import get_logger
from .transfer import (
    CancellationToken,
    TransferController,
    TransferOutcome,
    TransferResult,
)

logger = get_logger(__name__)


class TransferWorker(QThread):
    """Thread running one download attempt without blocking the UI."""

    progress = Signal(str, int, int)  # model_id, attempt, percent
    transfer_finished = Signal(str, int, object)  # model_id, attempt, TransferResult

    def __init__(
        self,
        model_id: str,
        destination: Path,
        attempt: int = 0,
        session=None,
        previous: Optional["TransferWorker"] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.model_id = model_id
        self.attempt = attempt
        self.token = CancellationToken()
        self._previous = previous
        self._controller = TransferController(
            model_id,
            destination,
            self.token,
            on_progress=self._on_progress,
            session=session,
        )

    @property
    def partial_path(self) -> Path:
        return self._controller.partial_path

    def cancel(self) -> None:
        self.token.cancel()

    def run(self):
        # A cancelled attempt of the same model may still be draining its
        # last chunk into the same partial file
        if self._previous is not None:
            self._previous.wait()
            self._previous = None

        if self.token.cancelled:
            result = TransferResult(TransferOutcome.CANCELLED)
        else:
            try:
                result = self._controller.run()
            except Exception as e:
                logger.exception(f"Unexpected error downloading {self.model_id}")
                result = TransferResult(TransferOutcome.FAILED, error=str(e))

        self.transfer_finished.emit(self.model_id, self.attempt, result)

    def _on_progress(self, percent: int) -> None:
        self.progress.emit(self.model_id, self.attempt, percent)
