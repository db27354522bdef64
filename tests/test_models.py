"""모델 검증 테스트 (원본 JSON 형식 호환)"""

import pytest
from pydantic import ValidationError

from conftest import formula_json, make_formula
from jeongsi.models import (
    AdmissionStatus,
    BonusPolicy,
    MaxOfLanguageAndMath,
    MixedConvertedMode,
    ScoringFormula,
    StandardMode,
    TopKorMath,
    UnsupportedMode,
)


class TestFormulaMode:
    def test_legacy_type_folded(self):
        formula = make_formula(type="mixed_converted", conversion_table_id="t1")
        assert formula.mode == MixedConvertedMode(conversion_table_id="t1")

    def test_explicit_standard(self):
        assert isinstance(make_formula().mode, StandardMode)

    def test_missing_type_is_unsupported(self):
        data = formula_json()
        del data["type"]
        assert ScoringFormula.model_validate(data).mode == UnsupportedMode(name="")

    def test_unknown_type(self):
        formula = make_formula(type="z_score")
        assert formula.mode == UnsupportedMode(name="z_score")

    def test_dump_and_reload(self):
        formula = make_formula(
            type="mixed_converted",
            conversion_table_id="t1",
            specialRule="top_kor_math",
            specialRuleConfig={"topKorMath": {"korRatio": 40, "mathRatio": 30, "engRatio": 10, "expRatio": 20}},
        )
        reloaded = ScoringFormula.model_validate(formula.model_dump(by_alias=True))
        assert reloaded == formula


class TestSpecialRule:
    def test_config_folded(self):
        formula = make_formula(
            specialRule="top_kor_math",
            specialRuleConfig={"topKorMath": {"korRatio": 40, "mathRatio": 30, "engRatio": 10,
                                              "expRatio": 20, "mathBonus": 0.05}},
        )
        assert isinstance(formula.special_rule, TopKorMath)
        assert formula.special_rule.math_bonus == 0.05
        assert not formula.is_composite

    def test_default_language_math_ids(self):
        formula = make_formula(specialRule="max_of_language_and_math")
        assert formula.special_rule == MaxOfLanguageAndMath(
            language_formula="건국대_언어중심", math_formula="건국대_수리중심"
        )
        assert formula.is_composite

    @pytest.mark.parametrize("tag", ["exp_top1", "nonsense"])
    def test_unimplemented_tags_have_no_rule(self, tag):
        assert make_formula(specialRule=tag).special_rule is None

    def test_incomplete_config_rejected(self):
        with pytest.raises(ValidationError):
            make_formula(specialRule="max_of_two_formulas", specialRuleConfig={"twoFormulas": {"formulaA": "a"}})


class TestBonusPolicy:
    @pytest.mark.parametrize("value, expected", [
        (None, BonusPolicy.MULTIPLICATIVE),
        ("multiplicative", BonusPolicy.MULTIPLICATIVE),
        ("pknu_additive", BonusPolicy.ADDITIVE),
        ("additive", BonusPolicy.ADDITIVE),
    ])
    def test_values(self, value, expected):
        assert make_formula(bonusType=value).bonus_type == expected

    @pytest.mark.parametrize("value", ["pknu_v2", "bonus_plus"])
    def test_unknown_tag_falls_back_to_multiplicative(self, value):
        formula = make_formula(bonusType=value)
        assert formula.bonus_type == BonusPolicy.MULTIPLICATIVE
        assert formula.unsupported_bonus_type == value

    def test_known_tag_not_flagged(self):
        assert make_formula(bonusType="pknu_additive").unsupported_bonus_type is None

    def test_ratio_for(self):
        formula = make_formula(bonus={"exp": {"subjects": ["화학2"], "ratio": 0.03, "advancedRatio": 0.05}})
        assert formula.bonus.exp.ratio_for("화학2") == 0.05
        assert formula.bonus.exp.ratio_for("화학1") == 0.03
        assert not formula.bonus.exp.applies_to("")


def test_models_are_frozen():
    formula = make_formula()
    with pytest.raises(ValidationError):
        formula.label = "변경"


def test_status_labels():
    assert [s.label for s in AdmissionStatus] == ["안정", "소신", "상향", "위험"]
