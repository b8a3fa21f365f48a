from app.ml.models.mlp import ScreeningMLP

__all__ = ["ScreeningMLP"]
