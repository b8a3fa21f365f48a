from app.ml.inference.classifier import (
    BaseClassifier,
    ClassificationResult,
    ClassScore,
    HashSeededClassifier,
    ProjectInfo,
    StaticScoreClassifier,
    TorchClassifier,
    create_classifier,
)
from app.ml.inference.interpreter import Interpretation, interpret, match_label
from app.ml.inference.pipeline import AnalysisOutcome, ScreeningPipeline, error_payload

__all__ = [
    "BaseClassifier",
    "ClassificationResult",
    "ClassScore",
    "HashSeededClassifier",
    "ProjectInfo",
    "StaticScoreClassifier",
    "TorchClassifier",
    "create_classifier",
    "Interpretation",
    "interpret",
    "match_label",
    "AnalysisOutcome",
    "ScreeningPipeline",
    "error_payload",
]
