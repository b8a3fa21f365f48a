from app.ml.features.extractor import AudioConfig, AudioFeatureExtractor

__all__ = ["AudioConfig", "AudioFeatureExtractor"]
