"""
분석 결과 필터/정렬/통계
"""
from typing import Any, Dict, Iterable, List, Optional

from .config import STATUS_ORDER
from .models import AdmissionStatus, AnalysisResult


def _match_univ(univ_name: str, targets: Iterable[str]) -> bool:
    # 대학명 정규화: "경북대학교" → "경북대" 매칭
    for target in targets:
        target_normalized = target.replace("학교", "")
        if target_normalized in univ_name or univ_name in target:
            return True
    return False


def _match_major(dept_name: str, targets: Iterable[str]) -> bool:
    # 학과명 유연한 매칭: "컴퓨터공학과" → "컴퓨터"
    for target in targets:
        target_normalized = (
            target.replace("공학과", "").replace("학과", "").replace("학부", "").replace("과", "")
        )
        if target_normalized in dept_name or target in dept_name:
            return True
    return False


def filter_results(
    results: Iterable[AnalysisResult],
    univ_names: Optional[List[str]] = None,
    majors: Optional[List[str]] = None,
    groups: Optional[List[str]] = None,
    statuses: Optional[List[str]] = None,
) -> List[AnalysisResult]:
    """
    Args:
        results: 분석 결과
        univ_names: 대학 필터 (예: ["경북대", "부산대학교"])
        majors: 학과 필터 (예: ["컴퓨터공학과"])
        groups: 군 필터 (예: ["가", "나"])
        statuses: 판정 필터 (예: ["safe", "match"])
    """
    wanted_statuses = {AdmissionStatus(s) for s in statuses} if statuses else None

    filtered = []
    for result in results:
        if univ_names and not _match_univ(result.univ_name, univ_names):
            continue
        if majors and not _match_major(result.dept_name, majors):
            continue
        if groups and result.group not in groups:
            continue
        if wanted_statuses is not None and result.status not in wanted_statuses:
            continue
        filtered.append(result)
    return filtered


def sort_results(results: Iterable[AnalysisResult]) -> List[AnalysisResult]:
    """판정 순(안정 → 소신 → 상향 → 위험), 같은 판정 안에서는 상향컷 대비 여유가 큰 순"""
    return sorted(
        results,
        key=lambda r: (STATUS_ORDER.index(r.status.value), -r.gap_percent),
    )


def summarize_results(results: Iterable[AnalysisResult]) -> Dict[str, Any]:
    """판정별/군별 개수"""
    results = list(results)

    status_counts = {status: 0 for status in STATUS_ORDER}
    group_counts: Dict[str, int] = {}
    for r in results:
        status_counts[r.status.value] += 1
        group = r.group or "기타"
        group_counts[group] = group_counts.get(group, 0) + 1

    return {
        "total": len(results),
        "by_status": status_counts,
        "by_group": group_counts,
    }
