"""
대학별 정시 환산 점수 계산기
"""
from .eligibility import Eligibility, check_eligibility
from .formula import evaluate_formula, grade_table_score
from .subject_value import resolve_subject_value
from .university import (
    NoFormulaError,
    ScoringError,
    find_rule,
    resolve_university_score,
    select_formula,
)

__all__ = [
    "Eligibility",
    "check_eligibility",
    "evaluate_formula",
    "grade_table_score",
    "resolve_subject_value",
    "NoFormulaError",
    "ScoringError",
    "find_rule",
    "resolve_university_score",
    "select_formula",
]
