from app.ml.features import AudioFeatureExtractor
from app.ml.models import ScreeningMLP
from app.ml.inference import ScreeningPipeline, create_classifier

__all__ = [
    "AudioFeatureExtractor",
    "ScreeningMLP",
    "ScreeningPipeline",
    "create_classifier",
]
