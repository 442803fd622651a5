"""
Startup reconciliation of persisted model status against the disk.

A record claiming a model is downloaded is only trusted if the file is
actually there, and a record claiming a download is in flight is never
trusted: no transfer survives a restart. Partial files left behind by an
interrupted download are not purged.
"""

from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from ...utils.logger import get_logger
from .catalog import is_model_file_present
from .records import AssetRecord, LifecycleState
from .store import StatusStore

logger = get_logger(__name__)


def reconcile(
    records: Mapping[str, AssetRecord], models_dir: Optional[Path] = None
) -> Tuple[Dict[str, AssetRecord], bool]:
    """Return the corrected records and whether anything changed."""
    corrected: Dict[str, AssetRecord] = {}
    changed = False

    for model_id, record in records.items():
        fixed = record

        if record.state == LifecycleState.DOWNLOADING:
            logger.info(f"Discarding interrupted download of '{model_id}'")
            fixed = AssetRecord.not_present()
        elif record.state == LifecycleState.PRESENT:
            if not is_model_file_present(model_id, models_dir):
                logger.warning(
                    f"Model '{model_id}' is marked downloaded but its file is missing"
                )
                fixed = AssetRecord.not_present()
            elif record.progress != 100:
                fixed = AssetRecord.present()
        elif record.progress != 0:
            fixed = AssetRecord.not_present()

        if fixed != record:
            changed = True
        corrected[model_id] = fixed

    return corrected, changed


class DiskReconciler:
    def __init__(self, store: StatusStore, models_dir: Optional[Path] = None):
        self._store = store
        self._models_dir = models_dir

    def run(self) -> Dict[str, AssetRecord]:
        """
        Reconcile the stored records and persist them if anything changed.

        The corrected records are returned even when they cannot be saved;
        the next successful write persists them.
        """
        records, changed = reconcile(self._store.load(), self._models_dir)
        if changed:
            logger.info("Persisting reconciled model states")
            try:
                self._store.save(records)
            except OSError as e:
                logger.error(f"Could not persist reconciled model states: {e}")
        return records
