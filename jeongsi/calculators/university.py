"""
대학별 환산점수 결정

입결 행의 공식 ID로 대학 공식을 찾고, 두 공식 중 높은 점수를 택하는
특수 규칙(언어/수리중심, 두 공식 최대값, 인문/자연 최대값)을 처리합니다.
"""
from typing import Dict, List, Optional, Tuple

from ..models import (
    MaxOfHumanitiesNatural,
    MaxOfLanguageAndMath,
    MaxOfTwoFormulas,
    ScoreDetail,
    ScoringFormula,
    Student,
    UnivRule,
)
from ..tables import ScoreLookup
from ..trace import Trace, note
from .formula import evaluate_formula


class ScoringError(Exception):
    """환산 계산 오류"""


class NoFormulaError(ScoringError):
    """대학 규칙에 공식이 하나도 없음"""


def select_formula(
    rule: UnivRule,
    formula_id: Optional[str],
    trace: Optional[Trace] = None,
) -> ScoringFormula:
    """공식 ID로 조회, 없으면 첫 번째 공식"""
    formula = rule.get(formula_id)
    if formula is not None:
        return formula
    if not rule.formulas:
        raise NoFormulaError("No scoring formulas available for this university.")
    if formula_id:
        note(trace, f"공식 ID '{formula_id}' 없음: 기본 공식 '{rule.formulas[0].id}' 사용")
    return rule.formulas[0]


def _composite_pair(
    formula: ScoringFormula,
) -> Optional[Tuple[str, str, Optional[str], Optional[str]]]:
    """
    두 공식 비교 규칙의 (첫 공식 ID, 둘째 공식 ID, 첫 공식 채택 표기, 둘째 공식 채택 표기).
    표기가 None이면 공식 레이블을 사용합니다.
    """
    rule = formula.special_rule
    if isinstance(rule, MaxOfLanguageAndMath):
        return rule.language_formula, rule.math_formula, "언어중심", "수리중심"
    if isinstance(rule, MaxOfTwoFormulas):
        return rule.formula_a, rule.formula_b, None, None
    if isinstance(rule, MaxOfHumanitiesNatural):
        return rule.humanities_formula, rule.natural_formula, "인문계열", "자연계열"
    return None


def resolve_university_score(
    student: Student,
    rule: UnivRule,
    lookup: ScoreLookup,
    formula_id: Optional[str] = None,
    trace: Optional[Trace] = None,
) -> ScoreDetail:
    """
    대학 규칙으로 환산점수 계산

    Args:
        student: 학생
        rule: 대학 공식 목록
        lookup: 점수표/변환표 조회기
        formula_id: 입결 행의 공식 ID (없거나 못 찾으면 첫 번째 공식)
        trace: 진단 메시지 채널

    Returns:
        ScoreDetail (두 공식 비교 규칙이면 높은 쪽, 레이블에 채택 공식 표기)
    """
    target = select_formula(rule, formula_id, trace)

    pair = _composite_pair(target)
    if pair is not None:
        first_id, second_id, first_tag, second_tag = pair
        first = rule.get(first_id)
        second = rule.get(second_id)
        if first is not None and second is not None:
            first_result = evaluate_formula(student, first, lookup, trace)
            second_result = evaluate_formula(student, second, lookup, trace)
            if second_result.total > first_result.total:
                return second_result.relabel(f"{target.label} ({second_tag or second.label} 적용)")
            return first_result.relabel(f"{target.label} ({first_tag or first.label} 적용)")
        note(trace, f"공식 '{target.id}': 비교 대상 공식 '{first_id}'/'{second_id}' 없음, 단일 공식으로 계산")

    return evaluate_formula(student, target, lookup, trace)


# ============================================================
# 대학명 매칭
# ============================================================
def _name_variants(univ_name: str) -> List[str]:
    stripped = univ_name.replace("국립", "")
    return [
        univ_name.replace("학교", ""),              # 경북대학교 → 경북대
        univ_name + "학교",                         # 경북대 → 경북대학교
        univ_name.replace("대학교", "대"),
        univ_name.replace("대", "대학교"),
        stripped.replace("공과대학교", "공대"),
        stripped.replace("공과대", "공대"),
        univ_name.replace("공과대학교", "공대"),
        univ_name.replace("공과대", "공대"),
    ]


def find_rule(univ_name: str, rules: Dict[str, UnivRule]) -> Optional[UnivRule]:
    """대학명(및 표기 변형)으로 규칙 조회"""
    if univ_name in rules:
        return rules[univ_name]
    if not univ_name:
        return None
    for variant in _name_variants(univ_name):
        if variant and variant != univ_name and variant in rules:
            return rules[variant]
    return None
