"""
정시 환산점수 엔진: 대학별 환산 공식 계산 및 지원 가능성 판정
"""
from .analyzer import analyze, analyze_row, classify_status, gap_metrics
from .calculators import (
    NoFormulaError,
    ScoringError,
    check_eligibility,
    evaluate_formula,
    find_rule,
    resolve_university_score,
)
from .logger import setup_logger
from .loader import DataLoadError, load_admission_rows, load_lookup, load_rules, validate_rules
from .models import (
    AdmissionRow,
    AdmissionStatus,
    AnalysisResult,
    ConversionTableData,
    RulesData,
    ScoreDetail,
    ScoreTableData,
    ScoringFormula,
    Student,
    UnivRule,
)
from .search import filter_results, sort_results, summarize_results
from .tables import ScoreLookup
from .trace import Trace

__all__ = [
    # 계산
    "evaluate_formula",
    "resolve_university_score",
    "check_eligibility",
    "find_rule",
    "NoFormulaError",
    "ScoringError",
    # 분석
    "analyze",
    "analyze_row",
    "classify_status",
    "gap_metrics",
    "filter_results",
    "sort_results",
    "summarize_results",
    # 데이터
    "ScoreLookup",
    "Trace",
    "setup_logger",
    "DataLoadError",
    "load_rules",
    "load_lookup",
    "load_admission_rows",
    "validate_rules",
    # 모델
    "AdmissionRow",
    "AdmissionStatus",
    "AnalysisResult",
    "ConversionTableData",
    "RulesData",
    "ScoreDetail",
    "ScoreTableData",
    "ScoringFormula",
    "Student",
    "UnivRule",
]
