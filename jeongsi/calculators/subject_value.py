"""
과목별 환산값 결정

공식 유형(mode)에 따라 표준점수를 그 공식이 실제로 쓰는 값
(표준점수/백분위/변환점수/정규화 점수)으로 바꿉니다.
"""
from typing import Optional

from ..models import (
    MixedConvertedMode,
    NormalizedStdMode,
    PercentileMode,
    ScoringFormula,
    StandardMode,
)
from ..tables import ScoreLookup
from ..trace import Trace, note

KOR = "kor"
MATH = "math"
EXP = "exp"


def resolve_subject_value(
    subject: str,
    table_name: str,
    std_score: int,
    formula: ScoringFormula,
    lookup: ScoreLookup,
    trace: Optional[Trace] = None,
) -> float:
    """
    Args:
        subject: 과목 구분 ("kor" / "math" / "exp")
        table_name: 점수표 키 (선택과목명 또는 "국어"/"수학"/"exp")
        std_score: 표준점수
        formula: 환산 공식
        lookup: 점수표/변환표 조회기
        trace: 진단 메시지 채널

    Returns:
        공식이 사용하는 과목 환산값
    """
    mode = formula.mode

    if isinstance(mode, StandardMode):
        return std_score

    if isinstance(mode, PercentileMode):
        return lookup.percentile_of(table_name, std_score)

    if isinstance(mode, MixedConvertedMode):
        if subject != EXP:
            return std_score
        percentile = lookup.percentile_of(table_name, std_score)
        return lookup.convert(mode.conversion_table_id, table_name, percentile, trace)

    if isinstance(mode, NormalizedStdMode):
        max_score = lookup.max_std_score(table_name)
        return std_score / max_score if max_score > 0 else 0

    note(trace, f"공식 '{formula.id}': 지원하지 않는 유형 '{getattr(mode, 'name', '')}'")
    return 0
