"""
구조화 로깅 (structlog)
JSON 출력(LOG_FORMAT=json) 또는 로컬 개발용 콘솔 출력
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

import structlog

from app.core.config import settings


def _add_timestamp(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """ISO 8601 타임스탬프 보장"""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def configure_logging(level: str = settings.LOG_LEVEL, fmt: str = settings.LOG_FORMAT) -> None:
    level_value = getattr(logging, level.upper(), logging.INFO)

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if fmt.strip().lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


# import 시 1회 설정
if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    모듈 이름이 바인딩된 로거 반환

        logger = get_logger(__name__)
        logger.info("analysis_complete", has_parkinson=False, confidence=0.8)
    """
    return structlog.get_logger(name).bind(logger=name)
