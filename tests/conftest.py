"""테스트 공용 픽스처: 소규모 점수표/변환표/공식"""

import pytest

from jeongsi.models import (
    ConversionTableData,
    ScoreTableData,
    ScoringFormula,
    Student,
)
from jeongsi.tables import ScoreLookup

ENGLISH_TABLE = [0, -2, -4, -6, -8, -10, -12, -14, -16]
HISTORY_TABLE = [10, 10, 10, 9.8, 9.6, 9.4, 9.2, 9.0, 8.8]


SCORE_TABLE_JSON = {
    "version": "test",
    "tables": {
        "국어": {
            "130": {"std": 130, "pct": 95, "grade": 1},
            "120": {"std": 120, "pct": 80, "grade": 3},
        },
        "수학": {
            "150": {"std": 150, "pct": 100, "grade": 1},
            "140": {"std": 140, "pct": 98, "grade": 1},
            "125": {"std": 125, "pct": 85, "grade": 3},
            "110": {"std": 110, "pct": 60, "grade": 5},
        },
        "물리학1": {
            "70": {"std": 70, "pct": 99, "grade": 1},
            "65": {"std": 65, "pct": 93, "grade": 2},
            "50": {"std": 50, "pct": 40, "grade": 6},
        },
        "화학1": {
            "62": {"std": 62, "pct": 88.4, "grade": 3},
            "48": {"std": 48, "pct": 35, "grade": 6},
        },
        "exp": {
            "72": {"std": 72, "pct": 99, "grade": 1},
            "60": {"std": 60, "pct": 80, "grade": 3},
        },
    },
}

CONVERSION_TABLE_JSON = {
    "version": "test",
    "tables": {
        "univ_natural": {
            "물리학1": {"93": 66.5, "99": 70.0},
            "default": {"88": 63.0, "80": 60.0},
        },
        "only_subject": {
            "물리학1": {"93": 66.5},
        },
    },
}


def formula_json(**overrides):
    """원본 univ_rules.json 형식의 공식 dict"""
    data = {
        "id": "std",
        "label": "표준점수",
        "type": "standard",
        "weights": {"kor": 1.0, "math": 1.2, "eng": 1.0, "exp": 0.8},
        "english_table": ENGLISH_TABLE,
        "history_table": HISTORY_TABLE,
    }
    data.update(overrides)
    return data


def make_formula(**overrides) -> ScoringFormula:
    return ScoringFormula.model_validate(formula_json(**overrides))


def make_student(scores=None, options=None, name="홍길동") -> Student:
    base_scores = {"kor": 130, "math": 140, "eng": 2, "hist": 1, "exp1": 65, "exp2": 62}
    base_options = {"kor": "언어와매체", "math": "미적분", "exp1": "물리학1", "exp2": "화학1"}
    base_scores.update(scores or {})
    if options is not False:
        base_options.update(options or {})
    return Student.model_validate({
        "id": "s1",
        "name": name,
        "scores": base_scores,
        "subjectOptions": base_options if options is not False else None,
    })


@pytest.fixture
def score_table() -> ScoreTableData:
    return ScoreTableData.model_validate(SCORE_TABLE_JSON)


@pytest.fixture
def conversion_table() -> ConversionTableData:
    return ConversionTableData.model_validate(CONVERSION_TABLE_JSON)


@pytest.fixture
def lookup(score_table, conversion_table) -> ScoreLookup:
    return ScoreLookup(score_table, conversion_table)


@pytest.fixture
def student() -> Student:
    return make_student()
