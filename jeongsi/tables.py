"""
Logic Layer: 점수표/변환표 조회

표준점수 → 백분위/등급, 과목 최고 표준점수, 백분위 → 대학별 변환점수.
데이터가 없을 때는 예외 대신 정해진 대체값을 돌려줍니다.
(백분위 0, 등급 9, 최고점 100, 변환 실패 시 백분위 그대로)
"""
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, NamedTuple, Optional

from .models import ConversionTableData, ScoreMeta, ScoreTableData
from .trace import Trace, note

KOREAN_TABLE = "국어"
MATH_TABLE = "수학"
EXPLORATION_TABLE = "exp"  # 탐구 공용 점수표
DEFAULT_CONVERSION = "default"

WORST_GRADE = 9
DEFAULT_MAX_STD_SCORE = 100


class Lookup(NamedTuple):
    """조회 결과: found=False면 value는 대체값"""
    value: float
    found: bool


def round_half_up(value: float) -> int:
    """백분위 반올림 (0.5는 올림)"""
    return int(math.floor(value + 0.5))


def round_score(value: float) -> float:
    """점수 소수 둘째 자리 반올림 (0.005는 0에서 먼 쪽으로)"""
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class ScoreLookup:
    """점수표/변환표 조회 클래스"""

    def __init__(
        self,
        score_table: ScoreTableData,
        conversion_table: Optional[ConversionTableData] = None,
    ):
        self.score_table = score_table
        self.conversion_table = conversion_table

    def _table(self, table_name: str) -> Optional[Dict[int, ScoreMeta]]:
        return self.score_table.tables.get(table_name)

    def _exploration_fallback(self, table_name: str) -> Optional[Dict[int, ScoreMeta]]:
        """국어/수학이 아닌 과목은 탐구 공용표로 대체"""
        if table_name in (KOREAN_TABLE, MATH_TABLE):
            return None
        return self._table(EXPLORATION_TABLE)

    # ------------------------------------------------------------
    # 백분위
    # ------------------------------------------------------------
    def lookup_percentile(self, table_name: str, std_score: int) -> Lookup:
        table = self._table(table_name)
        if table is None:
            table = self._exploration_fallback(table_name)
            if table is None:
                return Lookup(0, False)
        entry = table.get(std_score)
        if entry is None or not entry.pct:
            return Lookup(0, entry is not None)
        return Lookup(entry.pct, True)

    def percentile_of(self, table_name: str, std_score: int) -> float:
        return self.lookup_percentile(table_name, std_score).value

    # ------------------------------------------------------------
    # 등급
    # ------------------------------------------------------------
    def lookup_grade(self, table_name: str, std_score: int) -> Lookup:
        # 등급은 공용표로 대체하지 않음: 없으면 최하 등급
        table = self._table(table_name)
        if table is None:
            return Lookup(WORST_GRADE, False)
        entry = table.get(std_score)
        if entry is None or not 1 <= entry.grade <= WORST_GRADE:
            return Lookup(WORST_GRADE, False)
        return Lookup(entry.grade, True)

    def grade_of(self, table_name: str, std_score: int) -> int:
        return int(self.lookup_grade(table_name, std_score).value)

    # ------------------------------------------------------------
    # 최고 표준점수
    # ------------------------------------------------------------
    def lookup_max_std_score(self, table_name: str) -> Lookup:
        table = self._table(table_name)
        if table is None:
            table = self._exploration_fallback(table_name)
        if not table:
            return Lookup(DEFAULT_MAX_STD_SCORE, False)
        return Lookup(max(table.keys()), True)

    def max_std_score(self, table_name: str) -> float:
        return self.lookup_max_std_score(table_name).value

    # ------------------------------------------------------------
    # 변환표
    # ------------------------------------------------------------
    def lookup_conversion(
        self,
        conversion_table_id: Optional[str],
        table_name: str,
        percentile: float,
        trace: Optional[Trace] = None,
    ) -> Lookup:
        """
        백분위를 반올림해 변환표에서 조회합니다.
        과목 표가 없으면 'default' 표, 그것도 없으면 백분위를 그대로 반환합니다.
        """
        if not conversion_table_id or self.conversion_table is None:
            note(trace, "변환표 정보 없음: 백분위를 그대로 사용")
            return Lookup(percentile, False)

        group = self.conversion_table.tables.get(conversion_table_id)
        if group is None:
            note(trace, f"변환표 ID '{conversion_table_id}' 없음: 백분위를 그대로 사용")
            return Lookup(percentile, False)

        mapping = group.get(table_name)
        if mapping is None:
            mapping = group.get(DEFAULT_CONVERSION)
        if mapping is None:
            note(trace, f"변환표 '{conversion_table_id}'에 '{table_name}'/default 없음")
            return Lookup(percentile, False)

        converted = mapping.get(round_half_up(percentile))
        if converted is None:
            return Lookup(percentile, False)
        return Lookup(converted, True)

    def convert(
        self,
        conversion_table_id: Optional[str],
        table_name: str,
        percentile: float,
        trace: Optional[Trace] = None,
    ) -> float:
        return self.lookup_conversion(conversion_table_id, table_name, percentile, trace).value
