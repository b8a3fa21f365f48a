"""
음성 스크리닝 API 엔드포인트
업로드 검증과 임시 파일 스테이징만 담당하고 분석은 ScreeningPipeline 에 위임
"""
import re
import tempfile
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import ScreeningError, UploadRejectedError, UpstreamIOError
from app.core.logging import get_logger
from app.ml.inference.pipeline import ScreeningPipeline, error_payload
from app.schemas.screening import (
    AnalysisResponse,
    ErrorResponse,
    ModelInfoResponse,
    ReadingTextResponse,
)

logger = get_logger(__name__)

router = APIRouter()

READING_PASSAGE = (
    "The North Wind and the Sun were disputing which was the stronger, when a traveler "
    "came along wrapped in a warm cloak. They agreed that the one who first succeeded in "
    "making the traveler take his cloak off should be considered stronger than the other. "
    "Then the North Wind blew as hard as he could, but the more he blew the more closely "
    "did the traveler fold his cloak around him; and at last the North Wind gave up the "
    "attempt. Then the Sun shone out warmly, and immediately the traveler took off his "
    "cloak. And so the North Wind was obliged to confess that the Sun was the stronger "
    "of the two."
)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def get_pipeline(request: Request) -> ScreeningPipeline:
    """lifespan 에서 생성된 파이프라인 의존성 주입"""
    return request.app.state.pipeline


def _file_extension(filename: str) -> str:
    return "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _safe_name(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", Path(filename).name) or "audio"


async def stage_upload(file: UploadFile) -> Path:
    """
    업로드 검증 후 임시 디렉토리에 고유한 이름으로 저장
    파일명: {time_ns}-{random}-{원본 파일명}
    """
    file_ext = _file_extension(file.filename or "")
    if file_ext not in settings.UPLOAD_ALLOWED_EXTENSIONS:
        raise UploadRejectedError(
            f"Unsupported file format. Allowed: {', '.join(settings.UPLOAD_ALLOWED_EXTENSIONS)}"
        )

    content = await file.read(settings.UPLOAD_MAX_FILE_SIZE + 1)
    if len(content) > settings.UPLOAD_MAX_FILE_SIZE:
        raise UploadRejectedError(
            f"File exceeds maximum size of {settings.UPLOAD_MAX_FILE_SIZE} bytes",
            status_code=413,
        )

    temp_dir = Path(settings.UPLOAD_TEMP_DIR)
    temp_dir.mkdir(parents=True, exist_ok=True)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=temp_dir,
            prefix=f"{time.time_ns()}-",
            suffix=f"-{_safe_name(file.filename)}",
            delete=False,
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(content)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise UpstreamIOError(f"Could not stage upload: {e.strerror}") from e
    return tmp_path


@router.get("/text", response_model=ReadingTextResponse)
async def get_reading_text():
    """녹음 시 읽을 지문"""
    return ReadingTextResponse(text=READING_PASSAGE)


@router.post(
    "/analyze-audio",
    response_model=AnalysisResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_audio(
    audio: Optional[UploadFile] = File(None),
    pipeline: ScreeningPipeline = Depends(get_pipeline)
):
    """
    음성 녹음 파일 분석

    - **audio**: WAV, MP3, M4A, OGG 오디오 파일

    Returns:
        분류 결과와 해석 (판정, 신뢰도, 메시지)
    """
    if audio is None:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "no_audio", "details": "No audio file uploaded"},
        )

    tmp_path = None
    try:
        tmp_path = await stage_upload(audio)
        logger.info("processing_audio_file", filename=tmp_path.name)
        outcome = await pipeline.analyze_file_async(tmp_path)
    except ScreeningError as e:
        logger.warning("analysis_failed", error=e.code, details=e.message)
        return JSONResponse(status_code=e.status_code, content=e.to_payload())
    except Exception as e:
        logger.exception("analysis_error")
        return JSONResponse(status_code=500, content=error_payload(e))
    finally:
        # 취소 등으로 파이프라인에 도달하지 못한 스테이징 파일 정리
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)

    return outcome.to_payload()


@router.get("/model/info", response_model=ModelInfoResponse)
async def get_model_info(pipeline: ScreeningPipeline = Depends(get_pipeline)):
    """현재 로드된 모델 정보 조회"""
    classifier = pipeline.classifier
    info = classifier.get_project_info()
    return ModelInfoResponse(
        owner=info.owner,
        name=info.name,
        version=info.version,
        classifier=type(classifier).__name__,
        labels=classifier.labels,
        positive_label=classifier.positive_label,
        input_length=classifier.input_length,
        threshold=classifier.threshold,
    )
