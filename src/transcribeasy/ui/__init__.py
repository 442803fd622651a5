from .model_list import ModelListWidget, ModelRow

__all__ = ["ModelListWidget", "ModelRow"]
