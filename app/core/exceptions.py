"""
스크리닝 파이프라인 예외 정의
각 예외는 외부에 노출되는 고정 에러 코드와 HTTP 상태 코드를 가진다.
"""
from typing import Any, Dict


class ScreeningError(Exception):
    """파이프라인 예외 기본 클래스"""

    code: str = "analysis_failed"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.code, "details": self.message}


class InvalidAudioError(ScreeningError):
    """빈 입력 또는 해석할 수 없는 오디오"""

    code = "invalid_audio"
    status_code = 400


class NotInitializedError(ScreeningError):
    """init() 이전에 분류기 사용 (기동 순서 버그)"""

    code = "not_initialized"
    status_code = 503


class FeatureShapeMismatchError(ScreeningError):
    """피처 추출기와 모델 입력 길이 불일치 (설정 오류)"""

    code = "feature_shape_mismatch"
    status_code = 500

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Feature vector has length {actual}, model expects {expected}"
        )
        self.expected = expected
        self.actual = actual


class UpstreamIOError(ScreeningError):
    """스테이징된 업로드 파일이 없거나 읽을 수 없음"""

    code = "upstream_io"
    status_code = 500


class ModelLoadError(ScreeningError):
    """모델 체크포인트 로드 실패"""

    code = "model_load_failed"
    status_code = 500


class UploadRejectedError(ScreeningError):
    """업로드 형식/크기 제한 위반"""

    code = "upload_rejected"

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
