"""
로깅 유틸리티
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import get_settings


def setup_logger(
    name: str = "jeongsi",
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """로거 설정 및 반환

    Args:
        name: 로거 이름
        level: 로그 레벨 (기본값: settings.LOG_LEVEL)
        log_file: 로그 파일 경로 (기본값: settings.LOG_FILE, 비어 있으면 콘솔만)

    Returns:
        설정된 Logger 인스턴스
    """
    settings = get_settings()
    logger = logging.getLogger(name)

    # 이미 핸들러가 설정되어 있으면 반환
    if logger.handlers:
        return logger

    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=settings.LOG_FORMAT,
        datefmt=settings.LOG_DATE_FORMAT,
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file if log_file is not None else settings.LOG_FILE
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"파일 로깅 설정 실패: {e}")

    return logger
