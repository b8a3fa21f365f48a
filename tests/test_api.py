"""
API tests: upload validation, staging cleanup, response shapes and dependency override.
"""

from __future__ import annotations

import pytest

from app.api.endpoints.screening import READING_PASSAGE, get_pipeline
from app.main import app
from app.ml.inference.interpreter import DISCLAIMER_MARKER

from tests.conftest import make_wav_bytes


def _upload(client, content, filename="recording.wav"):
    return client.post("/api/analyze-audio", files={"audio": (filename, content, "audio/wav")})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_reading_text(client):
    response = client.get("/api/text")
    assert response.status_code == 200
    assert response.json()["text"] == READING_PASSAGE
    assert response.json()["text"].startswith("The North Wind and the Sun")


def test_model_info(client):
    data = client.get("/api/model/info").json()
    assert data["owner"] == "Demo"
    assert data["name"] == "Parkinsons Speech Analysis"
    assert data["classifier"] == "HashSeededClassifier"
    assert data["labels"] == ["healthy", "parkinson"]
    assert data["input_length"] == 13


def test_analyze_audio_success(client, upload_dir):
    response = _upload(client, make_wav_bytes())
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [r["label"] for r in data["result"]["results"]] == ["healthy", "parkinson"]
    assert DISCLAIMER_MARKER in data["interpretation"]["message"]
    assert list(upload_dir.iterdir()) == []


def test_analyze_audio_is_deterministic(client):
    first = _upload(client, make_wav_bytes()).json()
    second = _upload(client, make_wav_bytes()).json()
    assert first == second


def test_analyze_audio_with_fixed_scores(client, make_pipeline, upload_dir):
    app.dependency_overrides[get_pipeline] = lambda: make_pipeline({"parkinson": 0.73, "healthy": 0.27})

    data = _upload(client, make_wav_bytes(), filename="my recording.ogg").json()
    assert data["interpretation"]["hasParkinson"] is True
    assert data["interpretation"]["confidence"] == 0.73
    assert "73.0%" in data["interpretation"]["message"]
    assert data["result"]["anomaly"] is True
    assert list(upload_dir.iterdir()) == []


def test_missing_audio_field(client):
    response = client.post("/api/analyze-audio")
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["error"] == "no_audio"


def test_unsupported_extension(client, upload_dir):
    response = _upload(client, b"abc", filename="notes.txt")
    assert response.status_code == 400
    assert response.json()["error"] == "upload_rejected"
    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


def test_file_too_large(client, upload_dir, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "UPLOAD_MAX_FILE_SIZE", 1024)
    response = _upload(client, b"\x00" * 2048)
    assert response.status_code == 413
    assert response.json()["error"] == "upload_rejected"
    assert list(upload_dir.iterdir()) == []


def test_empty_upload_is_invalid_audio(client, upload_dir):
    response = _upload(client, b"")
    assert response.status_code == 400
    data = response.json()
    assert data == {"success": False, "error": "invalid_audio", "details": "Audio input is empty"}
    assert list(upload_dir.iterdir()) == []


def test_shape_mismatch_reported(client, static_classifier, upload_dir):
    from app.ml.features import AudioConfig, AudioFeatureExtractor
    from app.ml.inference import ScreeningPipeline

    pipeline = ScreeningPipeline(
        extractor=AudioFeatureExtractor(AudioConfig(num_features=128)),
        classifier=static_classifier({"healthy": 0.8, "parkinson": 0.2}),
    )
    app.dependency_overrides[get_pipeline] = lambda: pipeline

    response = _upload(client, make_wav_bytes())
    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "feature_shape_mismatch"
    assert "128" in data["details"]
    assert list(upload_dir.iterdir()) == []


def test_unexpected_error_is_generic(client, upload_dir):
    class Broken:
        async def analyze_file_async(self, path):
            path.unlink()
            raise KeyError("internal")

    app.dependency_overrides[get_pipeline] = lambda: Broken()

    response = _upload(client, make_wav_bytes())
    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "analysis_failed",
        "details": "Failed to analyze audio",
    }


@pytest.mark.parametrize("filename", ["a.WAV", "b.mp3", "c.m4a", "d.ogg"])
def test_allowed_extensions(client, filename):
    response = _upload(client, make_wav_bytes(duration=0.2), filename=filename)
    assert response.status_code == 200


def test_staged_upload_removed_when_pipeline_never_reads_it(client, upload_dir):
    class Unreachable:
        async def analyze_file_async(self, path):
            raise KeyError("worker unavailable")

    app.dependency_overrides[get_pipeline] = lambda: Unreachable()

    response = _upload(client, make_wav_bytes())
    assert response.status_code == 500
    assert list(upload_dir.iterdir()) == []
