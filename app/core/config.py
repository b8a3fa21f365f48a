from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import AnyHttpUrl


class Settings(BaseSettings):
    PROJECT_NAME: str = "Parkinson Speech Screening"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    # 오디오 처리 설정 (학습 시 사용한 값과 동일해야 함)
    AUDIO_SAMPLE_RATE: int = 16000
    AUDIO_WINDOW_SIZE: int = 1024
    AUDIO_HOP_LENGTH: int = 512
    AUDIO_NUM_MFCC: int = 13
    AUDIO_NUM_FEATURES: int = 13
    AUDIO_PRE_EMPHASIS: float = 0.97
    AUDIO_MIN_FREQ: float = 0.0
    AUDIO_MAX_FREQ: float = 8000.0
    AUDIO_NUM_MEL_FILTERS: int = 26
    AUDIO_MAX_DURATION: float = 60.0  # 초
    AUDIO_STRICT_DECODING: bool = False

    # ML 모델 설정
    MODEL_TYPE: str = "stub"  # stub, static, torch
    MODEL_PATH: Optional[str] = "checkpoints/screening_model.pt"
    MODEL_CONFIG_PATH: Optional[str] = "checkpoints/screening_config.json"
    MODEL_INPUT_LENGTH: int = 13
    MODEL_THRESHOLD: float = 0.5
    MODEL_LABELS: List[str] = ["healthy", "parkinson"]
    MODEL_POSITIVE_LABEL: str = "parkinson"
    MODEL_OWNER: str = "Demo"
    MODEL_NAME: str = "Parkinsons Speech Analysis"
    MODEL_VERSION: str = "1.0.0"

    # 업로드 설정
    UPLOAD_MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    UPLOAD_ALLOWED_EXTENSIONS: List[str] = [".wav", ".mp3", ".m4a", ".ogg"]
    UPLOAD_TEMP_DIR: str = "./uploads"

    # 로깅 설정
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json, console

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
