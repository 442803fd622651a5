import json
import os
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ...utils.logger import get_logger
from ..settings.paths import get_models_dir

logger = get_logger(__name__)

PARTIAL_SUFFIX = ".part"


class UnknownModelError(ValueError):
    pass


class ModelInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    url: str = ""
    filename: str = ""

    @field_validator("id")
    @classmethod
    def id_not_empty(cls, v):
        if not v.strip():
            raise ValueError("id must be a non-empty string")
        return v

    @model_validator(mode="before")
    @classmethod
    def default_filename(cls, data):
        if isinstance(data, dict) and not data.get("filename"):
            data = {**data, "filename": f"{data.get('id', '')}.bin"}
        return data

    @property
    def has_source(self) -> bool:
        return bool(self.url.strip())


def load_models() -> List[ModelInfo]:
    try:
        current_dir = os.path.dirname(os.path.abspath(__file__))
        json_path = os.path.join(current_dir, "models.json")

        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return [ModelInfo.model_validate(item) for item in data]
    except Exception as e:
        logger.error(f"Error loading models.json: {e}")
        return []


AVAILABLE_MODELS: List[ModelInfo] = load_models()

MODEL_IDS: Tuple[str, ...] = tuple(model.id for model in AVAILABLE_MODELS)

for _model in AVAILABLE_MODELS:
    if not _model.has_source:
        logger.warning(
            f"Model '{_model.id}' has no source URL; downloads will always fail"
        )


def get_model_by_id(model_id: str) -> Optional[ModelInfo]:
    for model in AVAILABLE_MODELS:
        if model.id == model_id:
            return model
    return None


def require_model(model_id: str) -> ModelInfo:
    model = get_model_by_id(model_id)
    if model is None:
        raise UnknownModelError(f"Unknown model: {model_id}")
    return model


def get_model_path(model_id: str, models_dir: Optional[Path] = None) -> Path:
    """Absolute destination of a model file, derived from the catalog entry."""
    model = require_model(model_id)
    base = Path(models_dir) if models_dir is not None else get_models_dir()
    return (base / model.filename).absolute()


def get_partial_path(model_id: str, models_dir: Optional[Path] = None) -> Path:
    destination = get_model_path(model_id, models_dir)
    return destination.with_name(destination.name + PARTIAL_SUFFIX)


def is_model_file_present(model_id: str, models_dir: Optional[Path] = None) -> bool:
    path = get_model_path(model_id, models_dir)
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False
