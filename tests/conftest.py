"""
Pytest fixtures: audio buffers, extractors, fixed-score classifiers and an API client.
"""

from __future__ import annotations

import io

import numpy as np
import pytest
import soundfile as sf

from app.ml.features import AudioConfig, AudioFeatureExtractor
from app.ml.inference import ProjectInfo, ScreeningPipeline, StaticScoreClassifier

PROJECT_INFO = ProjectInfo(owner="Demo", name="Parkinsons Speech Analysis", version="1.0.0")


def make_wav_bytes(duration: float = 1.0, sample_rate: int = 16000, freq: float = 220.0) -> bytes:
    t = np.arange(int(duration * sample_rate)) / sample_rate
    y = 0.3 * np.sin(2 * np.pi * freq * t) + 0.05 * np.sin(2 * np.pi * 3 * freq * t)
    buf = io.BytesIO()
    sf.write(buf, y.astype(np.float32), sample_rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


def random_bytes(seed: int, size: int) -> bytes:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=size, dtype=np.uint8).tobytes()


@pytest.fixture
def extractor():
    return AudioFeatureExtractor(AudioConfig())


@pytest.fixture
def wav_bytes():
    return make_wav_bytes()


@pytest.fixture
def static_classifier():
    """Factory for an initialised classifier returning a fixed score table."""

    def _make(scores, positive_label="parkinson", threshold=0.5, input_length=13):
        classifier = StaticScoreClassifier(
            scores=scores,
            project_info=PROJECT_INFO,
            positive_label=positive_label,
            input_length=input_length,
            threshold=threshold,
        )
        classifier.init()
        return classifier

    return _make


@pytest.fixture
def make_pipeline(extractor, static_classifier):
    def _make(scores, **kwargs):
        return ScreeningPipeline(extractor=extractor, classifier=static_classifier(scores, **kwargs))

    return _make


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Stage uploads in a per-test directory."""
    from app.core.config import settings

    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_TEMP_DIR", str(path))
    return path


@pytest.fixture
def client(upload_dir):
    """FastAPI TestClient with lifespan (classifier init) executed."""
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
