"""
지원 자격 검사: 필수 응시 과목 제한 + 수능최저
"""
from typing import NamedTuple, Optional

from ..models import SUM_MATH_EXP_AVG_TRUNC, ScoringFormula, Student
from ..tables import MATH_TABLE, ScoreLookup


class Eligibility(NamedTuple):
    eligible: bool
    reason: Optional[str] = None


ELIGIBLE = Eligibility(True)


def check_eligibility(
    student: Student,
    formula: ScoringFormula,
    lookup: ScoreLookup,
) -> Eligibility:
    """
    학생이 공식의 응시 조건과 수능최저를 만족하는지 확인합니다.

    검사 순서:
    1. 선택과목 정보가 없으면 불합격
    2. 수학 선택과목 제한
    3. 탐구 허용 과목 수 (expCount)
    4. 수능최저: 수학 등급 + floor((탐구1 등급 + 탐구2 등급) / 2) <= limit
    """
    options = student.subject_options
    scores = student.scores

    if options is None:
        return Eligibility(False, "선택과목 정보 없음")

    restrictions = formula.restrictions
    if restrictions is not None:
        if restrictions.math is not None and options.math not in restrictions.math:
            allowed = ", ".join(restrictions.math)
            return Eligibility(False, f"수학 필수 응시 조건 미충족 ({allowed})")

        if restrictions.exp is not None and restrictions.exp_count:
            match_count = sum(
                1 for name in (options.exp1, options.exp2) if name in restrictions.exp
            )
            if match_count < restrictions.exp_count:
                return Eligibility(False, "탐구 필수 응시 조건 미충족 (과학탐구 2과목 등)")

    requirement = formula.min_grade_requirement
    if requirement is not None and requirement.type == SUM_MATH_EXP_AVG_TRUNC:
        math_grade = lookup.grade_of(MATH_TABLE, scores.math)
        exp1_grade = lookup.grade_of(options.exp1, scores.exp1)
        exp2_grade = lookup.grade_of(options.exp2, scores.exp2)
        exp_avg = (exp1_grade + exp2_grade) // 2
        grade_sum = math_grade + exp_avg
        if grade_sum > requirement.limit:
            return Eligibility(
                False,
                f"수능최저 미충족 (수학{math_grade} + 과탐평균{exp_avg} = {grade_sum}, 기준 {requirement.limit})",
            )

    return ELIGIBLE
