"""
프로젝트 전역 설정 및 상수 정의
"""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# ============================================================
# 환경 설정
# ============================================================
class Settings(BaseSettings):
    # 데이터 파일 디렉토리 (univ_rules.json 등)
    DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_FILE: str = ""  # 비어 있으면 파일 로깅 안 함

    # 배치 분석 동시 실행 수 (0 또는 1이면 순차 실행)
    ANALYZE_MAX_WORKERS: int = 0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="JEONGSI_",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# ============================================================
# 판정 레이블
# ============================================================
class ClassificationLabel:
    """
    판정 기준 (컷 점수 3단계):
    - 안정: 내 점수 >= safeCut
    - 소신: 내 점수 >= matchCut
    - 상향: 내 점수 >= upwardCut
    - 위험: 그 외 (또는 환산 불가)
    """
    SAFE = "안정"
    MATCH = "소신"
    UPWARD = "상향"
    DANGER = "위험"


# 정렬 시 판정 우선순위
STATUS_ORDER = ["safe", "match", "upward", "danger"]

# 분석 결과 레이블
NO_DATA_LABEL = "데이터 없음"
UNCOMPUTABLE_LABEL = "산출 불가"
REJECTED_PREFIX = "[불합격]"
