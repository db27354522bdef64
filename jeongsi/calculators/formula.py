"""
단일 공식 환산점수 계산기

계산 순서:
1. 지원 자격 검사 (불합격이면 총점 0)
2. 과목별 환산값 결정 (국어/수학/탐구1/탐구2)
3. 가산점 (곱셈형: 환산값 × (1 + 비율) / 가산형: 표준점수 × 비율을 별도 합산)
4. 탐구 반영값 (1과목 반영이면 높은 과목, 아니면 합)
5. 가중치 적용, 영어 환산
6. 특수 규칙 (수학/탐구 택1, 상위 N과목, 국어/수학 상위 비율)
7. 한국사, 기본 점수 합산 → 소수 둘째 자리 반올림
"""
from typing import List, NamedTuple, Optional, Tuple

from ..config import REJECTED_PREFIX
from ..models import (
    BonusPolicy,
    GradeDetail,
    MathOrExpBetter,
    PercentileMode,
    ScoreDetail,
    ScoringFormula,
    Student,
    SubjectDetail,
    TopKorMath,
    TopNSubjects,
)
from ..tables import EXPLORATION_TABLE, KOREAN_TABLE, MATH_TABLE, ScoreLookup, round_score
from ..trace import Trace, note
from .eligibility import check_eligibility
from .subject_value import EXP, KOR, MATH, resolve_subject_value

ENG = "eng"

# 특수 규칙 총점 기준 (백분위 공식 100, 그 외 200)
PERCENTILE_TOTAL_SCORE = 100
STANDARD_TOTAL_SCORE = 200


class SubjectValues(NamedTuple):
    """가중치 적용 전 과목 환산값"""
    kor: float
    math: float
    exp1: float
    exp2: float


class Contribution(NamedTuple):
    """가중치 적용 후 과목별 반영 점수"""
    kor: SubjectDetail
    math: SubjectDetail
    exp: SubjectDetail
    eng_score: float


def grade_table_score(table: List[float], grade: int) -> float:
    """등급표(영어/한국사)에서 점수 조회, 등급 인덱스는 표 범위로 제한"""
    if not table:
        return 0
    index = max(0, min(grade - 1, len(table) - 1))
    return table[index] or 0


def rejected_detail(student: Student, reason: str) -> ScoreDetail:
    """불합격 결과: 총점 0, 레이블에 사유 기록"""
    return ScoreDetail(
        formula_label=f"{REJECTED_PREFIX} {reason}",
        eng=GradeDetail(grade=student.scores.eng, score=0),
        hist=GradeDetail(grade=student.scores.hist, score=0),
        total=0,
    )


def _detail(raw: float, weight: float, calc: Optional[float] = None) -> SubjectDetail:
    return SubjectDetail(raw=raw, weight=weight, calc=raw * weight if calc is None else calc)


# ============================================================
# 환산값 / 가산점
# ============================================================
def _resolve_values(
    student: Student,
    formula: ScoringFormula,
    lookup: ScoreLookup,
    trace: Optional[Trace],
) -> SubjectValues:
    scores = student.scores
    options = student.subject_options
    exp1_table = (options.exp1 if options else "") or EXPLORATION_TABLE
    exp2_table = (options.exp2 if options else "") or EXPLORATION_TABLE

    return SubjectValues(
        kor=resolve_subject_value(KOR, KOREAN_TABLE, scores.kor, formula, lookup, trace),
        math=resolve_subject_value(MATH, MATH_TABLE, scores.math, formula, lookup, trace),
        exp1=resolve_subject_value(EXP, exp1_table, scores.exp1, formula, lookup, trace),
        exp2=resolve_subject_value(EXP, exp2_table, scores.exp2, formula, lookup, trace),
    )


def _apply_multiplicative_bonus(
    values: SubjectValues,
    student: Student,
    formula: ScoringFormula,
) -> SubjectValues:
    bonus = formula.bonus
    options = student.subject_options
    if bonus is None or options is None:
        return values

    math_value, exp1_value, exp2_value = values.math, values.exp1, values.exp2
    if bonus.math and bonus.math.applies_to(options.math):
        math_value = math_value * (1 + bonus.math.ratio)
    if bonus.exp:
        if bonus.exp.applies_to(options.exp1):
            exp1_value = exp1_value * (1 + bonus.exp.ratio)
        if bonus.exp.applies_to(options.exp2):
            exp2_value = exp2_value * (1 + bonus.exp.ratio)
    return values._replace(math=math_value, exp1=exp1_value, exp2=exp2_value)


def _additive_bonus(student: Student, formula: ScoringFormula) -> Tuple[float, float]:
    """가산형 가산점 (수학, 탐구): 표준점수 × 과목별 비율"""
    bonus = formula.bonus
    options = student.subject_options
    scores = student.scores
    if bonus is None or options is None:
        return 0, 0

    math_bonus = 0.0
    if bonus.math and bonus.math.applies_to(options.math):
        math_bonus = scores.math * bonus.math.ratio_for(options.math)

    exp_bonus = 0.0
    if bonus.exp:
        for name, std_score in ((options.exp1, scores.exp1), (options.exp2, scores.exp2)):
            if bonus.exp.applies_to(name):
                exp_bonus += std_score * bonus.exp.ratio_for(name)
    return math_bonus, exp_bonus


# ============================================================
# 특수 규칙
# ============================================================
def _math_or_exp_better(contribution: Contribution) -> Contribution:
    """수학/탐구 가중 점수 중 높은 쪽만 반영 (동점이면 수학)"""
    math, exp = contribution.math, contribution.exp
    if exp.calc > math.calc:
        return contribution._replace(math=_detail(math.raw, 0))
    return contribution._replace(exp=_detail(exp.raw, 0))


def _total_score(formula: ScoringFormula) -> int:
    if isinstance(formula.mode, PercentileMode):
        return PERCENTILE_TOTAL_SCORE
    return STANDARD_TOTAL_SCORE


def _ratio_weight(total_score: int, ratio: float, count: int = 1) -> float:
    return (total_score * ratio / 100) / (total_score * count)


def _top_n_subjects(
    rule: TopNSubjects,
    formula: ScoringFormula,
    values: SubjectValues,
    exp_value: float,
    raw_eng: float,
) -> Contribution:
    """
    설정된 과목 중 환산값 상위 N과목만 반영합니다.
    i번째 과목에 ratios[i]를 적용하고 나머지 과목은 0점입니다.
    """
    total_score = _total_score(formula)
    candidates = [
        (name, value)
        for name, value in ((KOR, values.kor), (MATH, values.math), (ENG, raw_eng), (EXP, exp_value))
        if name in rule.subjects
    ]
    ranked = sorted(candidates, key=lambda item: item[1], reverse=True)

    weights = {KOR: 0.0, MATH: 0.0, ENG: 0.0, EXP: 0.0}
    for rank, (name, _) in enumerate(ranked[:rule.n]):
        ratio = rule.ratios[rank] if rank < len(rule.ratios) else 0
        count = rule.exp_count if name == EXP else 1
        weights[name] = _ratio_weight(total_score, ratio, count)

    return Contribution(
        kor=_detail(values.kor, weights[KOR]),
        math=_detail(values.math, weights[MATH]),
        exp=_detail(exp_value, weights[EXP]),
        eng_score=raw_eng * weights[ENG],
    )


def _top_kor_math(
    rule: TopKorMath,
    formula: ScoringFormula,
    values: SubjectValues,
    exp_value: float,
    raw_eng: float,
) -> Contribution:
    """국어/수학 중 높은 과목에 kor_ratio, 낮은 과목에 math_ratio 적용"""
    total_score = _total_score(formula)
    kor_first = values.kor >= values.math
    kor_weight = _ratio_weight(total_score, rule.kor_ratio if kor_first else rule.math_ratio)
    math_weight = _ratio_weight(total_score, rule.math_ratio if kor_first else rule.kor_ratio)
    eng_weight = _ratio_weight(total_score, rule.eng_ratio)
    exp_weight = _ratio_weight(total_score, rule.exp_ratio, rule.exp_count)

    math_calc = values.math * math_weight
    if rule.math_bonus and values.math > values.kor:
        math_calc = math_calc * (1 + rule.math_bonus)

    return Contribution(
        kor=_detail(values.kor, kor_weight),
        math=_detail(values.math, math_weight, math_calc),
        exp=_detail(exp_value, exp_weight),
        eng_score=raw_eng * eng_weight,
    )


# ============================================================
# 공식 계산
# ============================================================
def evaluate_formula(
    student: Student,
    formula: ScoringFormula,
    lookup: ScoreLookup,
    trace: Optional[Trace] = None,
) -> ScoreDetail:
    """
    학생 한 명의 성적을 공식 하나로 환산합니다.

    Args:
        student: 학생 (성적 + 선택과목)
        formula: 환산 공식
        lookup: 점수표/변환표 조회기
        trace: 진단 메시지 채널

    Returns:
        ScoreDetail (불합격이면 total=0, 레이블에 사유)
    """
    eligibility = check_eligibility(student, formula, lookup)
    if not eligibility.eligible:
        return rejected_detail(student, eligibility.reason or "")

    scores = student.scores
    weights = formula.weights

    values = _resolve_values(student, formula, lookup, trace)
    if formula.unsupported_bonus_type:
        note(trace, f"공식 '{formula.id}': 알 수 없는 가산 방식 '{formula.unsupported_bonus_type}' (곱셈 가산 적용)")
    math_bonus, exp_bonus = 0.0, 0.0
    if formula.bonus_type == BonusPolicy.ADDITIVE:
        math_bonus, exp_bonus = _additive_bonus(student, formula)
    else:
        values = _apply_multiplicative_bonus(values, student, formula)

    if formula.exp_count == 1:
        exp_value = max(values.exp1, values.exp2)
    else:
        exp_value = values.exp1 + values.exp2

    raw_eng = grade_table_score(formula.english_table, scores.eng)

    contribution = Contribution(
        kor=_detail(values.kor, weights.kor),
        math=_detail(values.math, weights.math, (values.math + math_bonus) * weights.math),
        exp=_detail(exp_value, weights.exp, (exp_value + exp_bonus) * weights.exp),
        eng_score=raw_eng * weights.eng,
    )

    rule = formula.special_rule
    if isinstance(rule, MathOrExpBetter):
        contribution = _math_or_exp_better(contribution)
    elif isinstance(rule, TopNSubjects):
        contribution = _top_n_subjects(rule, formula, values, exp_value, raw_eng)
    elif isinstance(rule, TopKorMath):
        contribution = _top_kor_math(rule, formula, values, exp_value, raw_eng)

    hist_score = grade_table_score(formula.history_table, scores.hist)
    base_score = formula.base_score or 0

    total = (
        base_score
        + contribution.kor.calc
        + contribution.math.calc
        + contribution.exp.calc
        + contribution.eng_score
        + hist_score
    )

    return ScoreDetail(
        formula_label=formula.label,
        kor=contribution.kor,
        math=contribution.math,
        exp=contribution.exp,
        eng=GradeDetail(grade=scores.eng, score=contribution.eng_score),
        hist=GradeDetail(grade=scores.hist, score=hist_score),
        total=round_score(total),
    )
