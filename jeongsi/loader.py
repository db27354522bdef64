"""
데이터 로더: 대학 규칙/점수표/변환표/입결 JSON 로드 및 검증

파일은 한 번 읽은 뒤 (종류, 경로) 단위로 캐시합니다.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from .calculators import find_rule
from .config import get_settings
from .models import (
    AdmissionRow,
    ConversionTableData,
    MixedConvertedMode,
    RulesData,
    ScoreTableData,
    UnsupportedMode,
)
from .tables import ScoreLookup

logger = logging.getLogger(__name__)

RULES_FILE = "univ_rules.json"
SCORE_TABLE_FILE = "score_table.json"
CONVERSION_TABLE_FILE = "conversion_table.json"
ADMISSION_FILE = "admission_data.json"

_admission_rows_adapter = TypeAdapter(List[AdmissionRow])

# 싱글톤 캐시
_cache: Dict[Tuple[str, str], Any] = {}


class DataLoadError(Exception):
    """데이터 파일을 읽을 수 없거나 형식이 잘못됨"""


def clear_cache() -> None:
    _cache.clear()


def _data_path(data_dir: Optional[Union[str, Path]], filename: str) -> Path:
    base = Path(data_dir) if data_dir is not None else get_settings().DATA_DIR
    return base / filename


def _load(kind: str, path: Path, parse):
    key = (kind, str(path))
    if key in _cache:
        return _cache[key]
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        value = parse(raw)
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(f"{path} 읽기 실패: {e}") from e
    except ValidationError as e:
        raise DataLoadError(f"{path} 형식 오류: {e}") from e
    _cache[key] = value
    logger.info(f"{kind} 로드 완료: {path}")
    return value


def load_rules(data_dir: Optional[Union[str, Path]] = None) -> RulesData:
    """univ_rules.json 로드 (캐시)"""
    return _load("rules", _data_path(data_dir, RULES_FILE), RulesData.model_validate)


def load_score_table(data_dir: Optional[Union[str, Path]] = None) -> ScoreTableData:
    """score_table.json 로드 (캐시)"""
    return _load("score_table", _data_path(data_dir, SCORE_TABLE_FILE), ScoreTableData.model_validate)


def load_conversion_table(data_dir: Optional[Union[str, Path]] = None) -> Optional[ConversionTableData]:
    """conversion_table.json 로드 (캐시), 파일이 없으면 None"""
    path = _data_path(data_dir, CONVERSION_TABLE_FILE)
    if not path.exists():
        logger.warning(f"변환표 파일 없음: {path}")
        return None
    return _load("conversion_table", path, ConversionTableData.model_validate)


def load_admission_rows(data_dir: Optional[Union[str, Path]] = None) -> List[AdmissionRow]:
    """admission_data.json 로드 (캐시)"""
    return _load("admission", _data_path(data_dir, ADMISSION_FILE), _admission_rows_adapter.validate_python)


def load_lookup(data_dir: Optional[Union[str, Path]] = None) -> ScoreLookup:
    return ScoreLookup(load_score_table(data_dir), load_conversion_table(data_dir))


# ============================================================
# 검증
# ============================================================
def validate_rules(
    rules: RulesData,
    rows: Optional[Sequence[AdmissionRow]] = None,
) -> Tuple[List[str], List[str]]:
    """
    대학 규칙(및 입결 행) 일관성 검사

    Returns:
        (errors, warnings)
    """
    errors: List[str] = []
    warnings: List[str] = []

    for univ_name, rule in rules.rules.items():
        if not rule.formulas:
            errors.append(f"{univ_name}: 공식 없음")
            continue

        seen = set()
        for idx, formula in enumerate(rule.formulas, 1):
            if formula.id in seen:
                errors.append(f"{univ_name} 공식 {idx}: id 중복 ({formula.id})")
            seen.add(formula.id)

            if isinstance(formula.mode, MixedConvertedMode) and not formula.mode.conversion_table_id:
                warnings.append(f"{univ_name} 공식 {idx}: mixed_converted인데 conversion_table_id 없음")

            if isinstance(formula.mode, UnsupportedMode):
                warnings.append(f"{univ_name} 공식 {idx}: 지원하지 않는 유형 '{formula.mode.name}'")

            if formula.unsupported_bonus_type:
                warnings.append(
                    f"{univ_name} 공식 {idx}: 알 수 없는 bonusType '{formula.unsupported_bonus_type}' (곱셈 가산 적용)"
                )

            if formula.is_composite:
                rule_config = formula.special_rule.model_dump()
                sibling_ids = [v for k, v in rule_config.items() if k != "kind"]
                missing = [fid for fid in sibling_ids if rule.get(fid) is None]
                if missing:
                    warnings.append(f"{univ_name} 공식 {idx}: 비교 대상 공식 없음 ({', '.join(missing)})")

    for idx, row in enumerate(rows or []):
        rule = find_rule(row.univ_name, rules.rules)
        if rule is None:
            warnings.append(f"admission_data[{idx}]: 규칙 없는 대학 ({row.univ_name})")
        elif row.scoring_class and rule.get(row.scoring_class) is None:
            warnings.append(
                f"admission_data[{idx}]: {row.univ_name} 공식 '{row.scoring_class}' 없음 (기본 공식 사용)"
            )

    return errors, warnings
