"""
오디오 피처 추출 모듈
업로드된 음성 바이트를 고정 길이 피처 벡터(MFCC 요약 통계)로 변환
"""
import io
from dataclasses import dataclass
from typing import Optional, Tuple

import librosa
import numpy as np
import soundfile as sf

from app.core.exceptions import InvalidAudioError


@dataclass(frozen=True)
class AudioConfig:
    """오디오 처리 설정"""
    sample_rate: int = 16000
    n_fft: int = 1024  # 윈도우 크기
    hop_length: int = 512
    n_mfcc: int = 13
    num_features: int = 13  # 모델 입력 피처 수
    pre_emphasis: float = 0.97
    fmin: float = 0.0
    fmax: float = 8000.0
    n_mels: int = 26
    max_duration: float = 60.0  # 초, 이후 구간은 분석하지 않음
    strict_decoding: bool = False

    @classmethod
    def from_settings(cls, settings) -> "AudioConfig":
        return cls(
            sample_rate=settings.AUDIO_SAMPLE_RATE,
            n_fft=settings.AUDIO_WINDOW_SIZE,
            hop_length=settings.AUDIO_HOP_LENGTH,
            n_mfcc=settings.AUDIO_NUM_MFCC,
            num_features=settings.AUDIO_NUM_FEATURES,
            pre_emphasis=settings.AUDIO_PRE_EMPHASIS,
            fmin=settings.AUDIO_MIN_FREQ,
            fmax=settings.AUDIO_MAX_FREQ,
            n_mels=settings.AUDIO_NUM_MEL_FILTERS,
            max_duration=settings.AUDIO_MAX_DURATION,
            strict_decoding=settings.AUDIO_STRICT_DECODING,
        )


class AudioFeatureExtractor:
    """
    음성 스크리닝용 피처 추출기

    - 동일한 바이트와 설정이면 항상 동일한 벡터 (난수, 파일 I/O 없음)
    - 출력 길이는 config.num_features 로 고정
    """

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or AudioConfig()

    @property
    def num_features(self) -> int:
        return self.config.num_features

    def extract_features(self, audio_bytes: bytes) -> np.ndarray:
        if not audio_bytes:
            raise InvalidAudioError("Audio input is empty")

        y = self.decode(audio_bytes)
        y = self._fit_length(y)
        y = librosa.effects.preemphasis(y, coef=self.config.pre_emphasis)

        mfcc = self.extract_mfcc(y)
        stats = self.extract_statistical_features(mfcc)

        features = np.zeros(self.config.num_features, dtype=np.float32)
        n = min(len(stats), self.config.num_features)
        features[:n] = stats[:n]
        return np.nan_to_num(features, nan=0.0, posinf=0.0, neginf=0.0)

    def decode(self, audio_bytes: bytes) -> np.ndarray:
        """
        컨테이너 포맷(WAV/FLAC/OGG/MP3) 디코딩 후 모노, 설정 샘플레이트로 변환
        헤더를 인식할 수 없으면 strict 모드에서는 거부, 아니면 raw PCM 으로 해석
        """
        try:
            y, sr = self._decode_container(audio_bytes)
        except RuntimeError as e:
            if self.config.strict_decoding:
                raise InvalidAudioError(f"Unsupported or corrupt audio: {e}") from e
            return self._decode_raw_pcm(audio_bytes)

        if len(y) == 0:
            if self.config.strict_decoding:
                raise InvalidAudioError("Audio file contains no samples")
            return self._decode_raw_pcm(audio_bytes)

        if sr != self.config.sample_rate:
            y = librosa.resample(y, orig_sr=sr, target_sr=self.config.sample_rate)
        return y.astype(np.float32)

    def _decode_container(self, audio_bytes: bytes) -> Tuple[np.ndarray, int]:
        with sf.SoundFile(io.BytesIO(audio_bytes)) as f:
            sr = f.samplerate
            # 분석 구간만 디코딩
            data = f.read(
                frames=int(self.config.max_duration * sr),
                dtype="float32",
                always_2d=True,
            )
        y = librosa.to_mono(data.T)
        return y, sr

    def _decode_raw_pcm(self, audio_bytes: bytes) -> np.ndarray:
        """헤더 없는 16-bit little-endian PCM 으로 해석"""
        usable = len(audio_bytes) - len(audio_bytes) % 2
        samples = np.frombuffer(audio_bytes[:usable], dtype="<i2")
        return samples.astype(np.float32) / 32768.0

    def _fit_length(self, y: np.ndarray) -> np.ndarray:
        """최대 길이로 자르고 최소 한 윈도우 길이로 패딩"""
        max_samples = int(self.config.max_duration * self.config.sample_rate)
        y = y[:max_samples]
        if len(y) < self.config.n_fft:
            y = np.pad(y, (0, self.config.n_fft - len(y)), mode="constant")
        return y

    def extract_mfcc(self, y: np.ndarray) -> np.ndarray:
        """MFCC 행렬 (n_mfcc x frames)"""
        return librosa.feature.mfcc(
            y=y,
            sr=self.config.sample_rate,
            n_mfcc=self.config.n_mfcc,
            n_fft=self.config.n_fft,
            hop_length=self.config.hop_length,
            n_mels=self.config.n_mels,
            fmin=self.config.fmin,
            fmax=self.config.fmax,
        )

    def extract_statistical_features(self, feature_matrix: np.ndarray) -> np.ndarray:
        """
        시간 축 요약 통계량 (mean, std, min, max, median, skewness, kurtosis)
        통계량 순으로 나열하므로 앞 n_mfcc 개 값은 MFCC 평균
        """
        x = feature_matrix.astype(np.float64)
        stats = [
            np.mean(x, axis=1),
            np.std(x, axis=1),
            np.min(x, axis=1),
            np.max(x, axis=1),
            np.median(x, axis=1),
            self._skewness(x),
            self._kurtosis(x),
        ]
        return np.concatenate(stats)

    def _skewness(self, x: np.ndarray) -> np.ndarray:
        """비대칭도 (표준편차 0 인 행은 0)"""
        centered = x - x.mean(axis=1, keepdims=True)
        std = x.std(axis=1)
        m3 = np.mean(centered ** 3, axis=1)
        safe = np.where(std == 0, 1.0, std)
        return np.where(std == 0, 0.0, m3 / safe ** 3)

    def _kurtosis(self, x: np.ndarray) -> np.ndarray:
        """첨도 (excess, 표준편차 0 인 행은 0)"""
        centered = x - x.mean(axis=1, keepdims=True)
        std = x.std(axis=1)
        m4 = np.mean(centered ** 4, axis=1)
        safe = np.where(std == 0, 1.0, std)
        return np.where(std == 0, 0.0, m4 / safe ** 4 - 3)
