"""
Model lifecycle manager.

Owns the per-model state machine (not downloaded -> downloading ->
downloaded), starts and cancels download threads, deletes model files, and
persists every change. All mutations happen on the thread the manager lives
in (the Qt main thread); download threads only talk back through queued
signals. Emits ``state_changed`` for every state or progress change.
"""

import itertools
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from PySide6.QtCore import QObject, Signal, Slot

from ...utils.logger import get_logger
from ..settings.paths import get_models_dir
from .catalog import (
    get_model_by_id,
    get_model_path,
    get_partial_path,
    require_model,
)
from .reconciler import DiskReconciler
from .records import AssetRecord, LifecycleState, default_records
from .store import StatusStore
from .transfer import TransferOutcome, TransferResult
from .worker import TransferWorker

logger = get_logger(__name__)


class ModelNotReadyError(RuntimeError):
    pass


class ModelManager(QObject):
    """
    Lifecycle orchestrator for the downloadable model catalog.

    Call ``start`` once before sending intents; it reconciles the stored
    status with the files on disk. Intents are fire-and-forget: the result
    is observed through ``state_changed`` or ``snapshot``.

    Example:
        manager = ModelManager()
        manager.state_changed.connect(on_change)
        manager.start()
        manager.request_download("base")
    """

    state_changed = Signal(str, object, str)  # model_id, AssetRecord, message

    def __init__(
        self,
        store: Optional[StatusStore] = None,
        models_dir: Optional[Path] = None,
        session=None,
        parent=None,
    ):
        """
        Args:
            store: Persistent status store (default: user config dir)
            models_dir: Directory holding model files (default: user data dir)
            session: requests-compatible session used by download threads
            parent: Qt parent object
        """
        super().__init__(parent)
        self._store = store if store is not None else StatusStore()
        self._models_dir = Path(models_dir) if models_dir is not None else None
        self._session = session

        self._records: Dict[str, AssetRecord] = default_records()
        self._active: Dict[str, TransferWorker] = {}
        self._threads: List[TransferWorker] = []
        self._attempts = itertools.count(1)
        self._started = False

    @property
    def models_dir(self) -> Path:
        if self._models_dir is None:
            self._models_dir = get_models_dir()
        return self._models_dir

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        if self._started:
            return

        self._records = DiskReconciler(self._store, self.models_dir).run()
        self._started = True

        logger.info(
            "Model states: "
            + ", ".join(f"{k}={r.state.value}" for k, r in self._records.items())
        )
        for model_id, record in self._records.items():
            self.state_changed.emit(model_id, record, record.status_text)

    def snapshot(self) -> Mapping[str, AssetRecord]:
        return MappingProxyType(dict(self._records))

    def record(self, model_id: str) -> AssetRecord:
        require_model(model_id)
        return self._records[model_id]

    def model_path(self, model_id: str) -> Path:
        return get_model_path(model_id, self.models_dir)

    def resolve_model_path(self, model_id: str) -> Path:
        """Absolute path of a downloaded model, for the transcription engine."""
        record = self.record(model_id)
        if record.state != LifecycleState.PRESENT:
            raise ModelNotReadyError(
                f"Model '{model_id}' is not downloaded ({record.state.value})"
            )
        return self.model_path(model_id)

    def installed_models(self) -> List[str]:
        return [
            model_id
            for model_id, record in self._records.items()
            if record.state == LifecycleState.PRESENT
        ]

    def is_transferring(self, model_id: str) -> bool:
        return model_id in self._active

    def active_transfers(self) -> List[str]:
        return list(self._active)

    # -- intents --------------------------------------------------------------

    def request_download(self, model_id: str) -> None:
        if not self._accepts_intent("download", model_id):
            return

        record = self._records[model_id]
        if model_id in self._active or record.state != LifecycleState.NOT_PRESENT:
            logger.debug(f"Ignoring download of {model_id} ({record.state.value})")
            return

        self._reap_threads()
        worker = TransferWorker(
            model_id,
            self.model_path(model_id),
            attempt=next(self._attempts),
            session=self._session,
            previous=self._draining_worker(model_id),
        )
        worker.progress.connect(self._on_transfer_progress)
        worker.transfer_finished.connect(self._on_transfer_finished)

        self._active[model_id] = worker
        self._threads.append(worker)
        self._commit(model_id, AssetRecord.downloading(0), "Downloading...")
        worker.start()

    def request_cancel(self, model_id: str) -> None:
        if not self._accepts_intent("cancel", model_id):
            return

        worker = self._active.pop(model_id, None)
        if worker is None:
            logger.debug(f"Ignoring cancel of {model_id}: no download in progress")
            return

        # The thread may still be writing the partial file; it is removed when
        # the superseded result arrives
        worker.cancel()
        logger.info(f"Cancelled download for {model_id}")
        self._commit(model_id, AssetRecord.not_present(), "Download cancelled")

    def request_delete(self, model_id: str) -> None:
        if not self._accepts_intent("delete", model_id):
            return

        record = self._records[model_id]
        if record.state != LifecycleState.PRESENT:
            logger.debug(f"Ignoring delete of {model_id} ({record.state.value})")
            return

        self._remove_file(self.model_path(model_id), "model file")
        logger.info(f"Deleted model file for {model_id}")
        self._commit(model_id, AssetRecord.not_present(), "Deleted")

    def shutdown(self, timeout_ms: int = 5000) -> None:
        """Cancel every download and wait for the download threads to exit."""
        for worker in self._active.values():
            worker.cancel()
        self._active.clear()

        for worker in self._threads:
            if not worker.wait(timeout_ms):
                logger.warning(f"Download thread for {worker.model_id} did not stop")
            else:
                self._remove_file(worker.partial_path, "partial file")
        self._reap_threads()

    # -- transfer events ------------------------------------------------------

    @Slot(str, int, int)
    def _on_transfer_progress(self, model_id: str, attempt: int, percent: int) -> None:
        if not self._is_current(model_id, attempt):
            return

        record = self._records[model_id]
        if record.state != LifecycleState.DOWNLOADING or percent <= record.progress:
            return

        updated = AssetRecord.downloading(percent)
        logger.debug(f"Download {model_id}: {percent}%")
        self._commit(model_id, updated, updated.status_text)

    @Slot(str, int, object)
    def _on_transfer_finished(
        self, model_id: str, attempt: int, result: TransferResult
    ) -> None:
        if not self._is_current(model_id, attempt):
            self._discard_stale_result(model_id, attempt, result)
            return

        worker = self._active.pop(model_id)

        if result.outcome == TransferOutcome.COMPLETED:
            logger.info(f"Model {model_id} downloaded ({result.bytes_received} bytes)")
            self._commit(model_id, AssetRecord.present(), "Downloaded")
        elif result.outcome == TransferOutcome.CANCELLED:
            self._remove_file(worker.partial_path, "partial file")
            self._commit(model_id, AssetRecord.not_present(), "Download cancelled")
        else:
            logger.error(f"Download of {model_id} failed: {result.error}")
            self._remove_file(worker.partial_path, "partial file")
            self._commit(model_id, AssetRecord.not_present(), "Download failed")

        self._reap_threads()

    def _discard_stale_result(
        self, model_id: str, attempt: int, result: TransferResult
    ) -> None:
        logger.debug(
            f"Discarding {result.outcome.name} from superseded attempt "
            f"{attempt} of {model_id}"
        )
        if model_id in self._active:
            return

        self._remove_file(get_partial_path(model_id, self.models_dir), "partial file")
        if (
            result.outcome == TransferOutcome.COMPLETED
            and self._records[model_id].state != LifecycleState.PRESENT
        ):
            self._remove_file(self.model_path(model_id), "model file")

    # -- helpers --------------------------------------------------------------

    def _accepts_intent(self, intent: str, model_id: str) -> bool:
        if not self._started:
            logger.warning(f"Ignoring {intent} of {model_id}: manager not started")
            return False
        if get_model_by_id(model_id) is None:
            logger.warning(f"Ignoring {intent} of unknown model {model_id!r}")
            return False
        return True

    def _is_current(self, model_id: str, attempt: int) -> bool:
        worker = self._active.get(model_id)
        return worker is not None and worker.attempt == attempt

    def _draining_worker(self, model_id: str) -> Optional[TransferWorker]:
        for worker in reversed(self._threads):
            if worker.model_id == model_id and not worker.isFinished():
                return worker
        return None

    def _reap_threads(self) -> None:
        finished = [w for w in self._threads if w.isFinished()]
        for worker in finished:
            self._threads.remove(worker)

    def _commit(self, model_id: str, record: AssetRecord, message: str) -> None:
        self._records[model_id] = record
        try:
            self._store.save(self._records)
        except OSError as e:
            logger.error(f"Model state for {model_id} not persisted: {e}")
        self.state_changed.emit(model_id, record, message)

    def _remove_file(self, path: Path, what: str) -> None:
        try:
            path.unlink()
            logger.debug(f"Removed {what} {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {what} {path}: {e}")
