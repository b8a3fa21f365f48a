"""
분류기 모듈
피처 벡터를 레이블별 점수와 anomaly 플래그로 변환

구현체는 init / get_project_info / classify 인터페이스를 공유하므로
학습된 모델과 결정적 스텁을 설정만으로 교체할 수 있다.
"""
import hashlib
import json
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import torch
import torch.nn.functional as F

from app.core.exceptions import (
    FeatureShapeMismatchError,
    ModelLoadError,
    NotInitializedError,
    ScreeningError,
)
from app.core.logging import get_logger
from app.ml.models import ScreeningMLP

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProjectInfo:
    """로드된 모델 메타데이터"""
    owner: str
    name: str
    version: str

    def to_dict(self) -> Dict[str, str]:
        return {"owner": self.owner, "name": self.name, "version": self.version}


@dataclass(frozen=True)
class ClassScore:
    label: str
    value: float


@dataclass(frozen=True)
class ClassificationResult:
    """레이블 선언 순서의 점수 목록 + anomaly 플래그"""
    results: Tuple[ClassScore, ...]
    anomaly: bool

    def score(self, label: str) -> Optional[float]:
        for item in self.results:
            if item.label == label:
                return item.value
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "anomaly": self.anomaly,
            "results": [{"label": r.label, "value": r.value} for r in self.results],
        }


class BaseClassifier(ABC):
    """
    분류기 공통 로직

    - init() 은 멱등 (두 번째 호출은 즉시 반환)
    - classify() 는 입력 길이 검증, 점수 [0, 1] 클리핑, anomaly 계산 담당
    - 서브클래스는 _score() (필요 시 _load()) 만 구현
    """

    def __init__(
        self,
        project_info: ProjectInfo,
        labels: Sequence[str],
        positive_label: str,
        input_length: int,
        threshold: float = 0.5
    ):
        labels = list(labels)
        if not labels:
            raise ValueError("At least one class label is required")
        if any(not label for label in labels):
            raise ValueError("Class labels must be non-empty")
        if len(set(labels)) != len(labels):
            raise ValueError(f"Class labels must be unique: {labels}")

        self._project_info = project_info
        self.labels: List[str] = labels
        self.positive_label = positive_label
        self.input_length = input_length
        self.threshold = threshold
        self._initialized = False
        self._init_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        with self._init_lock:
            if self._initialized:
                return
            self._load()
            self._initialized = True
        logger.info(
            "classifier_initialized",
            classifier=type(self).__name__,
            **self._project_info.to_dict(),
        )

    def get_project_info(self) -> ProjectInfo:
        return self._project_info

    def classify(self, features: np.ndarray) -> ClassificationResult:
        if not self._initialized:
            raise NotInitializedError("Classifier used before init()")

        features = np.asarray(features, dtype=np.float32)
        actual = features.shape[0] if features.ndim == 1 else features.size
        if features.ndim != 1 or actual != self.input_length:
            raise FeatureShapeMismatchError(expected=self.input_length, actual=actual)

        raw = np.asarray(self._score(features), dtype=np.float64).reshape(-1)
        if raw.shape[0] != len(self.labels):
            raise ScreeningError(
                f"Model produced {raw.shape[0]} scores for {len(self.labels)} labels"
            )
        values = np.clip(np.nan_to_num(raw, nan=0.0, posinf=1.0, neginf=0.0), 0.0, 1.0)

        results = tuple(
            ClassScore(label=label, value=float(value))
            for label, value in zip(self.labels, values)
        )
        positive = next((r for r in results if r.label == self.positive_label), None)
        anomaly = positive is not None and positive.value > self.threshold

        logger.debug("classified", scores={r.label: r.value for r in results}, anomaly=anomaly)
        return ClassificationResult(results=results, anomaly=anomaly)

    def _load(self) -> None:
        """모델 리소스 로드 (기본: 없음)"""

    @abstractmethod
    def _score(self, features: np.ndarray) -> Sequence[float]:
        """레이블 순서대로 점수 반환"""


class HashSeededClassifier(BaseClassifier):
    """
    결정적 스텁 분류기
    피처 바이트의 SHA-256 로 시드한 난수로 healthy 점수를 [0.3, 0.7] 에서 추출
    positive 점수 = 1 - healthy
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if len(self.labels) != 2 or self.positive_label not in self.labels:
            raise ValueError(
                "HashSeededClassifier needs exactly two labels including the positive label"
            )

    def _score(self, features: np.ndarray) -> Sequence[float]:
        digest = hashlib.sha256(features.astype("<f4").tobytes()).digest()
        rng = np.random.default_rng(int.from_bytes(digest[:8], "little"))
        negative = rng.uniform(0.3, 0.7)
        return [
            1.0 - negative if label == self.positive_label else negative
            for label in self.labels
        ]


class StaticScoreClassifier(BaseClassifier):
    """고정 점수 테이블을 반환하는 분류기 (테스트/데모용)"""

    def __init__(
        self,
        scores: Mapping[str, float],
        project_info: ProjectInfo,
        positive_label: str,
        input_length: int,
        threshold: float = 0.5
    ):
        super().__init__(
            project_info=project_info,
            labels=list(scores.keys()),
            positive_label=positive_label,
            input_length=input_length,
            threshold=threshold,
        )
        self._scores = [float(v) for v in scores.values()]

    def _score(self, features: np.ndarray) -> Sequence[float]:
        return self._scores


class TorchClassifier(BaseClassifier):
    """
    학습된 ScreeningMLP 체크포인트 기반 분류기

    체크포인트: {"model_state_dict": ..., "input_length": int (선택)}
    설정 JSON (선택): {"hidden_size": int, "dropout": float}
    """

    def __init__(
        self,
        model_path: str,
        project_info: ProjectInfo,
        labels: Sequence[str],
        positive_label: str,
        input_length: int,
        threshold: float = 0.5,
        config_path: Optional[str] = None,
        device: str = "cuda" if torch.cuda.is_available() else "cpu"
    ):
        super().__init__(project_info, labels, positive_label, input_length, threshold)
        self.model_path = model_path
        self.config_path = config_path
        self.device = device
        self.model: Optional[ScreeningMLP] = None

    def _load(self) -> None:
        if not self.model_path or not Path(self.model_path).exists():
            raise ModelLoadError(f"Model checkpoint not found: {self.model_path}")

        model_config: Dict[str, Any] = {}
        if self.config_path and Path(self.config_path).exists():
            with open(self.config_path, "r") as f:
                model_config = json.load(f)

        try:
            checkpoint = torch.load(self.model_path, map_location=self.device)
        except (OSError, RuntimeError) as e:
            raise ModelLoadError(f"Failed to read checkpoint {self.model_path}: {e}") from e

        trained_length = checkpoint.get("input_length", self.input_length)
        if trained_length != self.input_length:
            raise ModelLoadError(
                f"Checkpoint expects {trained_length} features, configured {self.input_length}"
            )

        model = ScreeningMLP(
            input_length=self.input_length,
            num_classes=len(self.labels),
            hidden_size=model_config.get("hidden_size", 64),
            dropout=model_config.get("dropout", 0.2),
        )
        try:
            model.load_state_dict(checkpoint["model_state_dict"])
        except (KeyError, RuntimeError) as e:
            raise ModelLoadError(f"Checkpoint does not match model: {e}") from e
        model.to(self.device)
        model.eval()
        self.model = model

        logger.info("model_loaded", path=self.model_path, num_classes=len(self.labels))

    @torch.no_grad()
    def _score(self, features: np.ndarray) -> Sequence[float]:
        x = torch.from_numpy(features).float().unsqueeze(0).to(self.device)
        probabilities = F.softmax(self.model(x), dim=1)[0]
        return probabilities.cpu().numpy().tolist()


def create_classifier(settings) -> BaseClassifier:
    """MODEL_TYPE 에 따른 분류기 생성"""
    project_info = ProjectInfo(
        owner=settings.MODEL_OWNER,
        name=settings.MODEL_NAME,
        version=settings.MODEL_VERSION,
    )
    common = dict(
        project_info=project_info,
        positive_label=settings.MODEL_POSITIVE_LABEL,
        input_length=settings.MODEL_INPUT_LENGTH,
        threshold=settings.MODEL_THRESHOLD,
    )

    if settings.MODEL_TYPE == "stub":
        return HashSeededClassifier(labels=settings.MODEL_LABELS, **common)
    elif settings.MODEL_TYPE == "static":
        # 모든 레이블에 동일한 중립 점수
        scores = {label: 0.5 for label in settings.MODEL_LABELS}
        return StaticScoreClassifier(scores=scores, **common)
    elif settings.MODEL_TYPE == "torch":
        return TorchClassifier(
            model_path=settings.MODEL_PATH,
            config_path=settings.MODEL_CONFIG_PATH,
            labels=settings.MODEL_LABELS,
            **common,
        )
    else:
        raise ValueError(f"Unknown model type: {settings.MODEL_TYPE}")
