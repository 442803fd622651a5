from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from .catalog import MODEL_IDS


class LifecycleState(str, Enum):
    """Persisted lifecycle state of a model file; values are the stored strings."""

    NOT_PRESENT = "not-downloaded"
    DOWNLOADING = "downloading"
    PRESENT = "downloaded"


class AssetRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    state: LifecycleState = LifecycleState.NOT_PRESENT
    progress: int = Field(default=0, ge=0, le=100)

    @classmethod
    def not_present(cls) -> "AssetRecord":
        return cls(state=LifecycleState.NOT_PRESENT, progress=0)

    @classmethod
    def downloading(cls, progress: int = 0) -> "AssetRecord":
        return cls(state=LifecycleState.DOWNLOADING, progress=progress)

    @classmethod
    def present(cls) -> "AssetRecord":
        return cls(state=LifecycleState.PRESENT, progress=100)

    @property
    def is_settled(self) -> bool:
        return self.state != LifecycleState.DOWNLOADING

    @property
    def status_text(self) -> str:
        if self.state == LifecycleState.DOWNLOADING:
            return f"Downloading ({self.progress}%)"
        if self.state == LifecycleState.PRESENT:
            return "Downloaded"
        return "Not downloaded"

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> "AssetRecord":
        return cls.model_validate(data)


def default_records() -> Dict[str, AssetRecord]:
    return {model_id: AssetRecord.not_present() for model_id in MODEL_IDS}
