"""정시 지원 분석기 테스트"""

import pytest

from conftest import formula_json
from jeongsi.analyzer import analyze, analyze_row, classify_status, gap_metrics
from jeongsi.models import AdmissionRow, AdmissionStatus, RulesData
from jeongsi.tables import round_score


@pytest.fixture
def rules() -> RulesData:
    return RulesData.model_validate({
        "version": "test",
        "rules": {
            "한국대학교": {
                "formulas": [
                    formula_json(id="std", label="표준점수"),
                    formula_json(id="geo", label="기하필수", restrictions={"math": ["기하"]}),
                ]
            },
            "빈대학교": {"formulas": []},
        },
    })


def make_row(**overrides) -> AdmissionRow:
    data = {
        "univName": "한국대학교",
        "deptName": "컴퓨터공학과",
        "scoringClass": "std",
        "group": "가",
        "recruitmentCount": 10,
        "safeCut": 420,
        "matchCut": 405,
        "upwardCut": 400,
    }
    data.update(overrides)
    return AdmissionRow.model_validate(data)


class TestClassifyStatus:
    """판정 경계는 상위 단계에 포함"""

    @pytest.mark.parametrize("total, expected", [
        (520, AdmissionStatus.SAFE),
        (500, AdmissionStatus.SAFE),
        (499.99, AdmissionStatus.MATCH),
        (480.00, AdmissionStatus.MATCH),
        (479.99, AdmissionStatus.UPWARD),
        (460, AdmissionStatus.UPWARD),
        (459.99, AdmissionStatus.DANGER),
    ])
    def test_boundaries(self, total, expected):
        assert classify_status(total, 500, 480, 460) == expected

    def test_zero_total_is_danger(self):
        assert classify_status(0, 0, 0, 0) == AdmissionStatus.DANGER
        assert classify_status(0, -10, -20, -30) == AdmissionStatus.DANGER


class TestGapMetrics:
    def test_values(self):
        assert gap_metrics(407.6, 400) == (7.6, 1.9)

    def test_half_rounds_up(self):
        diff, gap_percent = gap_metrics(407.125, 400)
        assert diff == 7.13
        assert gap_percent == pytest.approx(1.78, abs=0.01)

    def test_zero_upward_cut(self):
        assert gap_metrics(407.6, 0) == (407.6, 0)

    @pytest.mark.parametrize("total, upward_cut", [
        (407.6, 400),
        (512.37, 533.1),
        (88.123, 91.7),
        (700, 650.55),
    ])
    def test_gap_matches_stored_diff(self, total, upward_cut):
        diff, gap_percent = gap_metrics(total, upward_cut)
        assert gap_percent == round_score(diff / upward_cut * 100)


class TestAnalyzeRow:
    def test_match(self, student, rules, lookup):
        result = analyze_row(student, make_row(), rules.rules, lookup)
        assert result.my_score == pytest.approx(407.6)
        assert result.status == AdmissionStatus.MATCH
        assert result.status.label == "소신"
        assert result.diff == pytest.approx(7.6)
        assert result.gap_percent == pytest.approx(1.9)
        assert result.formula_label == "표준점수"
        assert result.notes == []

    def test_unknown_university(self, student, rules, lookup):
        result = analyze_row(student, make_row(univName="없는대학교"), rules.rules, lookup)
        assert result.status == AdmissionStatus.DANGER
        assert result.my_score == 0
        assert result.diff == 0
        assert result.gap_percent == 0
        assert result.formula_label == "데이터 없음"
        assert result.safe_cut == 420

    def test_evaluation_error_is_uncomputable(self, student, rules, lookup):
        result = analyze_row(student, make_row(univName="빈대학교"), rules.rules, lookup)
        assert result.status == AdmissionStatus.DANGER
        assert result.my_score == 0
        assert result.formula_label == "산출 불가"

    def test_ineligible_is_danger(self, student, rules, lookup):
        result = analyze_row(student, make_row(scoringClass="geo", upwardCut=0, matchCut=0, safeCut=0), rules.rules, lookup)
        assert result.my_score == 0
        assert result.status == AdmissionStatus.DANGER
        assert result.formula_label.startswith("[불합격]")

    def test_unknown_formula_id_noted(self, student, rules, lookup):
        result = analyze_row(student, make_row(scoringClass="zzz"), rules.rules, lookup)
        assert result.my_score == pytest.approx(407.6)
        assert len(result.notes) == 1

    def test_name_variant(self, student, rules, lookup):
        result = analyze_row(student, make_row(univName="한국대"), rules.rules, lookup)
        assert result.my_score == pytest.approx(407.6)


class TestRecruitmentCounts:
    def test_legacy_count(self, student, rules, lookup):
        result = analyze_row(student, make_row(earlyAdmissionCarryover=3), rules.rules, lookup)
        assert result.recruitment_count == 10
        assert result.initial_recruitment_count == 10
        assert result.early_admission_carryover == 3
        assert result.final_recruitment_count == 13

    def test_initial_count_preferred(self, student, rules, lookup):
        row = make_row(initialRecruitmentCount=8, earlyAdmissionCarryover=2)
        result = analyze_row(student, row, rules.rules, lookup)
        assert result.initial_recruitment_count == 8
        assert result.final_recruitment_count == 10

    def test_degraded_row_keeps_counts(self, student, rules, lookup):
        row = make_row(univName="없는대학교", recruitmentCount=None, initialRecruitmentCount=None,
                       earlyAdmissionCarryover=4, lastYearCompetitionRate=3.5)
        result = analyze_row(student, row, rules.rules, lookup)
        assert result.initial_recruitment_count == 0
        assert result.final_recruitment_count == 4
        assert result.last_year_competition_rate == 3.5


class TestAnalyze:
    def test_one_result_per_row(self, student, rules, lookup):
        rows = [make_row(), make_row(univName="없는대학교"), make_row(univName="빈대학교")]
        results = analyze(student, rows, rules, lookup, max_workers=1)
        assert [r.formula_label for r in results] == ["표준점수", "데이터 없음", "산출 불가"]

    def test_accepts_plain_rule_map(self, student, rules, lookup):
        results = analyze(student, [make_row()], rules.rules, lookup, max_workers=1)
        assert results[0].status == AdmissionStatus.MATCH

    def test_concurrent_results_keep_row_order(self, student, rules, lookup):
        rows = [
            make_row(deptName=f"학과{i}", upwardCut=300 + i, matchCut=350 + i, safeCut=400 + i)
            for i in range(40)
        ]
        sequential = analyze(student, rows, rules, lookup, max_workers=1)
        concurrent = analyze(student, rows, rules, lookup, max_workers=8)
        assert [r.dept_name for r in concurrent] == [f"학과{i}" for i in range(40)]
        assert concurrent == sequential

    def test_empty_rows(self, student, rules, lookup):
        assert analyze(student, [], rules, lookup, max_workers=4) == []
