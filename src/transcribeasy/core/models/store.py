"""
Persistent model status with JSON persistence.

Keeps one record per catalog model in a single document under an
application-private key. Loading never fails: a missing or corrupt file
falls back to the catalog defaults, record by record where possible.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import ValidationError

from ...utils.logger import get_logger
from ..settings.paths import get_config_dir
from .records import AssetRecord, default_records

logger = get_logger(__name__)

STORAGE_KEY = "app:modelStates:v2"
STATUS_FILENAME = "model_states.json"


class StatusStore:
    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = get_config_dir() / STATUS_FILENAME
        return self._path

    def load(self) -> Dict[str, AssetRecord]:
        records = default_records()
        document = self._read_document()

        raw_records = document.get(STORAGE_KEY)
        if raw_records is None:
            return records
        if not isinstance(raw_records, dict):
            logger.warning(
                f"Stored model states have unexpected type "
                f"{type(raw_records).__name__}, using defaults"
            )
            return records

        for model_id in records:
            if model_id not in raw_records:
                continue
            try:
                records[model_id] = AssetRecord.from_dict(raw_records[model_id])
            except ValidationError as e:
                logger.warning(
                    f"Invalid stored state for '{model_id}' "
                    f"{raw_records[model_id]!r}, resetting to default: {e}"
                )

        return records

    def save(self, records: Mapping[str, AssetRecord]) -> None:
        document = self._read_document()
        document[STORAGE_KEY] = {
            model_id: record.to_dict() for model_id, record in records.items()
        }

        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write-then-rename so a reader never sees a half-written document
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error(f"Could not save model states to {path}: {e}")
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _read_document(self) -> dict:
        path = self.path
        if not path.exists():
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Could not load model states: {e}. Using defaults.")
            return {}

        if not isinstance(data, dict):
            logger.warning("Model state file is not a JSON object. Using defaults.")
            return {}
        return data
