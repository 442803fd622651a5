from .catalog import (
    AVAILABLE_MODELS,
    MODEL_IDS,
    ModelInfo,
    UnknownModelError,
    get_model_by_id,
    get_model_path,
    get_partial_path,
    is_model_file_present,
    require_model,
)
from .manager import ModelManager, ModelNotReadyError
from .reconciler import DiskReconciler, reconcile
from .records import AssetRecord, LifecycleState, default_records
from .store import STORAGE_KEY, StatusStore
from .throttle import ProgressThrottle
from .transfer import (
    CancellationToken,
    TransferController,
    TransferOutcome,
    TransferResult,
)
from .worker import TransferWorker

__all__ = [
    "AVAILABLE_MODELS",
    "MODEL_IDS",
    "STORAGE_KEY",
    "AssetRecord",
    "CancellationToken",
    "DiskReconciler",
    "LifecycleState",
    "ModelInfo",
    "ModelManager",
    "ModelNotReadyError",
    "ProgressThrottle",
    "StatusStore",
    "TransferController",
    "TransferOutcome",
    "TransferResult",
    "TransferWorker",
    "UnknownModelError",
    "default_records",
    "get_model_by_id",
    "get_model_path",
    "get_partial_path",
    "is_model_file_present",
    "reconcile",
    "require_model",
]
