"""
분류 결과 해석
레이블 이름 매칭으로 positive/negative 점수를 찾아 사용자용 판정 메시지 생성
모든 메시지에는 전문가 상담 안내 문구가 포함된다.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence

from app.ml.inference.classifier import ClassificationResult, ClassScore

POSITIVE_PATTERNS = ("parkinson", "positive")
NEGATIVE_PATTERNS = ("healthy", "negative")

DISCLAIMER_MARKER = "consult with a healthcare professional"

DECISION_THRESHOLD = 0.5
FALLBACK_CONFIDENCE = 0.5
INCONCLUSIVE_MESSAGE = (
    "Analysis completed but results are inconclusive. "
    f"Please {DISCLAIMER_MARKER} for proper evaluation."
)


@dataclass(frozen=True)
class Interpretation:
    has_parkinson: bool
    confidence: float
    message: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "hasParkinson": self.has_parkinson,
            "confidence": self.confidence,
            "message": self.message,
        }


def match_label(scores: Iterable[ClassScore], patterns: Sequence[str]) -> Optional[ClassScore]:
    """레이블(소문자)에 패턴 중 하나라도 포함된 첫 번째 점수"""
    for score in scores:
        label = score.label.lower()
        if any(pattern in label for pattern in patterns):
            return score
    return None


def _percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def interpret(result: ClassificationResult) -> Interpretation:
    positive = match_label(result.results, POSITIVE_PATTERNS)
    negative = match_label(result.results, NEGATIVE_PATTERNS)

    if positive is None:
        return Interpretation(
            has_parkinson=bool(result.anomaly),
            confidence=FALLBACK_CONFIDENCE,
            message=INCONCLUSIVE_MESSAGE,
        )

    has_parkinson = positive.value > DECISION_THRESHOLD
    if has_parkinson:
        confidence = positive.value
        message = (
            "Analysis detected speech patterns that may indicate Parkinson's disease "
            f"({_percent(positive.value)} confidence). This is a screening tool only - "
            f"please {DISCLAIMER_MARKER} for proper medical evaluation and diagnosis."
        )
    else:
        confidence = negative.value if negative is not None else 1 - positive.value
        message = (
            "Analysis did not detect significant indicators of Parkinson's disease in the "
            f"speech patterns ({_percent(confidence)} confidence in healthy classification). "
            "Remember that this is a screening tool and cannot replace professional medical "
            f"advice - please {DISCLAIMER_MARKER} if you have concerns."
        )

    return Interpretation(has_parkinson=has_parkinson, confidence=confidence, message=message)
