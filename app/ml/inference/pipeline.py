"""
스크리닝 파이프라인
피처 추출 -> 분류 -> 해석 순서로 요청 1건을 처리
"""
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Union

from fastapi.concurrency import run_in_threadpool

from app.core.exceptions import InvalidAudioError, ScreeningError, UpstreamIOError
from app.core.logging import get_logger
from app.ml.features.extractor import AudioFeatureExtractor
from app.ml.inference.classifier import BaseClassifier, ClassificationResult
from app.ml.inference.interpreter import Interpretation, interpret

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnalysisOutcome:
    result: ClassificationResult
    interpretation: Interpretation

    def to_payload(self) -> Dict[str, Any]:
        return {
            "success": True,
            "result": self.result.to_dict(),
            "interpretation": self.interpretation.to_dict(),
        }


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning("staged_file_remove_failed", path=str(path), error=str(e))
        return
    logger.debug("staged_file_removed", path=str(path))


@contextmanager
def staged_file(path: Union[str, os.PathLike]) -> Iterator[bytes]:
    """
    스테이징된 업로드 파일을 읽어 내용 반환
    성공/실패와 관계없이 블록 종료 시 파일 삭제
    """
    path = Path(path)
    try:
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise UpstreamIOError(f"Audio file not found: {path.name}") from e
        except OSError as e:
            raise UpstreamIOError(f"Audio file could not be read: {path.name}") from e
        yield data
    finally:
        _remove(path)


class ScreeningPipeline:
    """
    음성 스크리닝 파이프라인

    분류기는 프로세스 단위로 한 번 생성/초기화되어 주입되고,
    피처 계산은 요청마다 수행된다. 예외는 재시도 없이 그대로 전파된다.
    """

    def __init__(
        self,
        extractor: AudioFeatureExtractor,
        classifier: BaseClassifier
    ):
        self.extractor = extractor
        self.classifier = classifier

    def analyze(self, audio_bytes: bytes) -> AnalysisOutcome:
        if not audio_bytes:
            raise InvalidAudioError("Audio input is empty")

        features = self.extractor.extract_features(audio_bytes)
        self.classifier.init()
        result = self.classifier.classify(features)
        interpretation = interpret(result)

        logger.info(
            "analysis_complete",
            num_bytes=len(audio_bytes),
            anomaly=result.anomaly,
            has_parkinson=interpretation.has_parkinson,
            confidence=interpretation.confidence,
        )
        return AnalysisOutcome(result=result, interpretation=interpretation)

    def analyze_file(self, path: Union[str, os.PathLike]) -> AnalysisOutcome:
        """스테이징 파일 분석 (파일은 항상 삭제됨)"""
        with staged_file(path) as audio_bytes:
            return self.analyze(audio_bytes)

    async def analyze_file_async(self, path: Union[str, os.PathLike]) -> AnalysisOutcome:
        """CPU 작업을 워커 스레드 풀에서 실행"""
        return await run_in_threadpool(self.analyze_file, path)


def error_payload(exc: Exception) -> Dict[str, Any]:
    """예외를 외부 응답 형식으로 변환 (내부 스택 정보는 노출하지 않음)"""
    if isinstance(exc, ScreeningError):
        return exc.to_payload()
    return {"success": False, "error": "analysis_failed", "details": "Failed to analyze audio"}
