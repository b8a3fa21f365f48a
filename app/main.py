from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path

from app.api.router import api_router
from app.core.config import settings
from app.core.logging import get_logger
from app.ml.features import AudioConfig, AudioFeatureExtractor
from app.ml.inference import ScreeningPipeline, create_classifier

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 분류기는 프로세스당 1회 초기화, 실패 시 기동 중단
    Path(settings.UPLOAD_TEMP_DIR).mkdir(parents=True, exist_ok=True)

    classifier = create_classifier(settings)
    classifier.init()
    project = classifier.get_project_info()
    logger.info("server_started", owner=project.owner, name=project.name, version=project.version)

    app.state.pipeline = ScreeningPipeline(
        extractor=AudioFeatureExtractor(AudioConfig.from_settings(settings)),
        classifier=classifier,
    )
    yield
    # Shutdown
    logger.info("server_stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Parkinson's speech screening API",
    lifespan=lifespan,
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API 라우터 등록
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
