"""
정시 지원 분석기: 모든 모집단위(입결 행)를 환산하고 안정/소신/상향/위험 판정

행마다 독립적으로 계산하므로 스레드 풀로 병렬 실행할 수 있으며,
결과는 입력 행 순서대로 반환됩니다.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .calculators import find_rule, resolve_university_score
from .config import NO_DATA_LABEL, UNCOMPUTABLE_LABEL, get_settings
from .models import (
    AdmissionRow,
    AdmissionStatus,
    AnalysisResult,
    RulesData,
    Student,
    UnivRule,
)
from .tables import ScoreLookup, round_score
from .trace import Trace

logger = logging.getLogger(__name__)


def classify_status(total: float, safe_cut: float, match_cut: float, upward_cut: float) -> AdmissionStatus:
    """
    컷 점수 기준 판정 (경계값은 상위 단계에 포함)

    - 총점 0 (불합격/데이터 없음): 위험
    - 내 점수 >= safeCut: 안정
    - 내 점수 >= matchCut: 소신
    - 내 점수 >= upwardCut: 상향
    - 그 외: 위험
    """
    if total == 0:
        return AdmissionStatus.DANGER
    if total >= safe_cut:
        return AdmissionStatus.SAFE
    if total >= match_cut:
        return AdmissionStatus.MATCH
    if total >= upward_cut:
        return AdmissionStatus.UPWARD
    return AdmissionStatus.DANGER


def gap_metrics(total: float, upward_cut: float) -> Tuple[float, float]:
    """(상향컷 대비 점수차, 백분율 차이), 둘 다 소수 둘째 자리 반올림"""
    diff = round_score(total - upward_cut)
    gap_percent = round_score(diff / upward_cut * 100) if upward_cut > 0 else 0
    return diff, gap_percent


def _result(
    row: AdmissionRow,
    total: float,
    status: AdmissionStatus,
    formula_label: str,
    trace: Trace,
    diff: float = 0,
    gap_percent: float = 0,
) -> AnalysisResult:
    return AnalysisResult(
        univ_name=row.univ_name,
        dept_name=row.dept_name,
        scoring_class=row.scoring_class,
        group=row.group,
        recruitment_count=row.recruitment_count or 0,
        initial_recruitment_count=row.initial_count,
        early_admission_carryover=row.carryover_count,
        final_recruitment_count=row.final_count,
        last_year_competition_rate=row.last_year_competition_rate or 0,
        my_score=total,
        safe_cut=row.safe_cut,
        match_cut=row.match_cut,
        upward_cut=row.upward_cut,
        diff=diff,
        gap_percent=gap_percent,
        status=status,
        formula_label=formula_label,
        notes=list(trace),
    )


def analyze_row(
    student: Student,
    row: AdmissionRow,
    rules: Dict[str, UnivRule],
    lookup: ScoreLookup,
) -> AnalysisResult:
    """입결 행 하나 분석 (예외를 밖으로 던지지 않음)"""
    trace = Trace()

    rule = find_rule(row.univ_name, rules)
    if rule is None:
        logger.warning(f"규칙 없음: {row.univ_name} / {row.dept_name}")
        return _result(row, 0, AdmissionStatus.DANGER, NO_DATA_LABEL, trace)

    try:
        detail = resolve_university_score(student, rule, lookup, row.scoring_class or None, trace)
    except Exception:
        logger.exception(f"환산 실패: {row.univ_name} / {row.dept_name} ({row.scoring_class})")
        return _result(row, 0, AdmissionStatus.DANGER, UNCOMPUTABLE_LABEL, trace)

    for message in trace:
        logger.debug(f"{row.univ_name} / {row.dept_name}: {message}")

    diff, gap_percent = gap_metrics(detail.total, row.upward_cut)
    status = classify_status(detail.total, row.safe_cut, row.match_cut, row.upward_cut)
    return _result(row, detail.total, status, detail.formula_label, trace, diff, gap_percent)


def analyze(
    student: Student,
    rows: Sequence[AdmissionRow],
    rules: Union[RulesData, Dict[str, UnivRule]],
    lookup: ScoreLookup,
    max_workers: Optional[int] = None,
) -> List[AnalysisResult]:
    """
    학생 성적으로 모든 모집단위 분석

    Args:
        student: 학생
        rows: 입결 행 목록
        rules: 대학명 → 공식 목록
        lookup: 점수표/변환표 조회기
        max_workers: 병렬 실행 스레드 수 (기본값: settings.ANALYZE_MAX_WORKERS, 1 이하면 순차)

    Returns:
        입력 행 순서와 같은 AnalysisResult 목록
    """
    rule_map = rules.rules if isinstance(rules, RulesData) else rules
    if max_workers is None:
        max_workers = get_settings().ANALYZE_MAX_WORKERS

    logger.info(
        f"분석 시작: 학생={student.name or student.id}, 모집단위 {len(rows)}개, 대학 규칙 {len(rule_map)}개"
    )

    if max_workers <= 1 or len(rows) <= 1:
        results = [analyze_row(student, row, rule_map, lookup) for row in rows]
    else:
        slots: List[Optional[AnalysisResult]] = [None] * len(rows)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(analyze_row, student, row, rule_map, lookup): idx
                for idx, row in enumerate(rows)
            }
            for future in as_completed(future_to_index):
                slots[future_to_index[future]] = future.result()
        results = [result for result in slots if result is not None]

    logger.info(f"분석 완료: {len(results)}개")
    return results
