"""
정시 환산 엔진 데이터 모델 (Pydantic)

원본 JSON 데이터(univ_rules.json, score_table.json, conversion_table.json,
admission_data.json)의 camelCase 키를 그대로 검증할 수 있도록
alias_generator=to_camel 을 사용합니다.
"""
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .config import ClassificationLabel


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ============================================================
# 학생 성적
# ============================================================
class StudentScores(_Model):
    """국어/수학/탐구는 표준점수, 영어/한국사는 등급(1~9)"""
    kor: int = 0
    math: int = 0
    eng: int = Field(default=1, description="영어 등급")
    hist: int = Field(default=1, description="한국사 등급")
    exp1: int = 0
    exp2: int = 0


class SubjectOptions(_Model):
    """선택과목 이름 (점수표/제한 목록 조회 키)"""
    kor: str = ""
    math: str = ""
    exp1: str = ""
    exp2: str = ""


class Student(_Model):
    id: str = ""
    name: str = ""
    class_num: Optional[int] = None
    student_num: Optional[int] = None
    subject_options: Optional[SubjectOptions] = None
    scores: StudentScores = Field(default_factory=StudentScores)


# ============================================================
# 점수표 / 변환표
# ============================================================
class ScoreMeta(_Model):
    std: Optional[int] = None
    pct: float = 0
    grade: int = 9


class ScoreTableData(_Model):
    """과목명(또는 'exp' 공용표) → {표준점수: ScoreMeta}"""
    version: str = ""
    tables: Dict[str, Dict[int, ScoreMeta]] = Field(default_factory=dict)


class ConversionTableData(_Model):
    """변환표 ID → 과목명(또는 'default') → {백분위: 변환점수}"""
    version: str = ""
    tables: Dict[str, Dict[str, Dict[int, float]]] = Field(default_factory=dict)


# ============================================================
# 공식 유형 (mode)
# ============================================================
class StandardMode(_Model):
    """표준점수 그대로 사용"""
    type: Literal["standard"] = "standard"


class PercentileMode(_Model):
    """백분위 사용"""
    type: Literal["percentile"] = "percentile"


class MixedConvertedMode(_Model):
    """국어/수학은 표준점수, 탐구는 백분위 → 변환표준점수"""
    type: Literal["mixed_converted"] = "mixed_converted"
    conversion_table_id: Optional[str] = None


class NormalizedStdMode(_Model):
    """표준점수 / 과목 최고 표준점수"""
    type: Literal["normalized_std"] = "normalized_std"


class UnsupportedMode(_Model):
    """알 수 없는 유형: 과목 환산값은 항상 0"""
    type: Literal["unsupported"] = "unsupported"
    name: str = ""


FormulaMode = Annotated[
    Union[StandardMode, PercentileMode, MixedConvertedMode, NormalizedStdMode, UnsupportedMode],
    Field(discriminator="type"),
]

_KNOWN_MODES = ("standard", "percentile", "mixed_converted", "normalized_std")


# ============================================================
# 특수 규칙 (special rule)
# ============================================================
class MathOrExpBetter(_Model):
    """수학/탐구 중 가중 점수가 높은 쪽만 반영"""
    kind: Literal["math_or_exp_better"] = "math_or_exp_better"


class TopNSubjects(_Model):
    """상위 N과목 선택, i번째 과목에 ratios[i] 적용"""
    kind: Literal["top_n_subjects"] = "top_n_subjects"
    n: int
    ratios: List[float]
    subjects: List[str]
    exp_count: int = 1


class TopKorMath(_Model):
    """국어/수학 중 높은 쪽에 kor_ratio, 낮은 쪽에 math_ratio"""
    kind: Literal["top_kor_math"] = "top_kor_math"
    kor_ratio: float
    math_ratio: float
    eng_ratio: float
    exp_ratio: float
    math_bonus: Optional[float] = None
    exp_count: int = 1


class MaxOfLanguageAndMath(_Model):
    """언어중심/수리중심 공식 중 높은 점수"""
    kind: Literal["max_of_language_and_math"] = "max_of_language_and_math"
    language_formula: str = "건국대_언어중심"
    math_formula: str = "건국대_수리중심"


class MaxOfTwoFormulas(_Model):
    kind: Literal["max_of_two_formulas"] = "max_of_two_formulas"
    formula_a: str
    formula_b: str


class MaxOfHumanitiesNatural(_Model):
    kind: Literal["max_of_humanities_natural"] = "max_of_humanities_natural"
    humanities_formula: str
    natural_formula: str


SpecialRule = Annotated[
    Union[
        MathOrExpBetter,
        TopNSubjects,
        TopKorMath,
        MaxOfLanguageAndMath,
        MaxOfTwoFormulas,
        MaxOfHumanitiesNatural,
    ],
    Field(discriminator="kind"),
]

# 특수 규칙 태그 → specialRuleConfig 안의 설정 키 (None: 설정 불필요)
_SPECIAL_RULE_CONFIG_KEYS = {
    "math_or_exp_better": None,
    "max_of_language_and_math": None,
    "top_n_subjects": "topN",
    "top_kor_math": "topKorMath",
    "max_of_two_formulas": "twoFormulas",
    "max_of_humanities_natural": "humanitiesNatural",
}

# 여러 공식을 함께 계산하는 규칙
COMPOSITE_RULES = (MaxOfLanguageAndMath, MaxOfTwoFormulas, MaxOfHumanitiesNatural)


# ============================================================
# 공식 구성 요소
# ============================================================
class Weights(_Model):
    kor: float = 0
    math: float = 0
    eng: float = 0
    exp: float = 0


class BonusPolicy(str, Enum):
    MULTIPLICATIVE = "multiplicative"  # 환산값 × (1 + ratio)
    ADDITIVE = "additive"              # 표준점수 × ratio 를 별도 가산


_LEGACY_BONUS_TYPES = {"pknu_additive": BonusPolicy.ADDITIVE}
_BONUS_TYPE_TAGS = {policy.value for policy in BonusPolicy} | set(_LEGACY_BONUS_TYPES)


class BonusConfig(_Model):
    """
    가산점 설정

    additive 정책에서는 과목명에 advanced_marker가 포함되면(예: "물리학2")
    advanced_ratio를, 아니면 ratio를 사용합니다.
    """
    subjects: List[str] = Field(default_factory=list)
    ratio: float = 0
    advanced_ratio: Optional[float] = None
    advanced_marker: str = "2"

    def applies_to(self, subject_name: str) -> bool:
        return bool(subject_name) and subject_name in self.subjects

    def ratio_for(self, subject_name: str) -> float:
        if self.advanced_ratio is not None and self.advanced_marker in subject_name:
            return self.advanced_ratio
        return self.ratio


class Bonus(_Model):
    math: Optional[BonusConfig] = None
    exp: Optional[BonusConfig] = None


class Restrictions(_Model):
    math: Optional[List[str]] = None  # 허용 수학 선택과목
    exp: Optional[List[str]] = None   # 허용 탐구 과목
    exp_count: Optional[int] = None   # 허용 목록에서 필요한 과목 수


SUM_MATH_EXP_AVG_TRUNC = "sum_math_exp_avg_trunc"


class MinGradeRequirement(_Model):
    """수능최저: 수학 등급 + floor(탐구 평균 등급) <= limit"""
    type: str = SUM_MATH_EXP_AVG_TRUNC
    limit: int


# ============================================================
# 환산 공식
# ============================================================
class ScoringFormula(_Model):
    id: str
    label: str = ""
    mode: FormulaMode = Field(default_factory=UnsupportedMode, alias="mode")
    base_score: Optional[float] = None
    weights: Weights = Field(default_factory=Weights)
    english_table: List[float] = Field(default_factory=list, alias="english_table")
    history_table: List[float] = Field(default_factory=list, alias="history_table")
    bonus: Optional[Bonus] = None
    bonus_type: BonusPolicy = BonusPolicy.MULTIPLICATIVE
    unsupported_bonus_type: Optional[str] = None  # 인식하지 못한 bonusType 원본 값
    restrictions: Optional[Restrictions] = None
    min_grade_requirement: Optional[MinGradeRequirement] = None
    special_rule: Optional[SpecialRule] = Field(default=None, alias="special_rule")

    @model_validator(mode="before")
    @classmethod
    def _fold_legacy_keys(cls, data: Any) -> Any:
        """
        원본 JSON의 평면 키(type, conversion_table_id, specialRule,
        specialRuleConfig)를 mode / special_rule 변형으로 묶습니다.
        type이 없으면 지원하지 않는 유형으로 봅니다.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if "mode" not in data and "type" in data:
            tag = data.pop("type")
            conversion_id = data.pop("conversion_table_id", None)
            if tag == "mixed_converted":
                data["mode"] = {"type": tag, "conversion_table_id": conversion_id}
            elif tag in _KNOWN_MODES:
                data["mode"] = {"type": tag}
            else:
                data["mode"] = {"type": "unsupported", "name": str(tag)}

        if "special_rule" not in data:
            tag = data.pop("specialRule", None)
            config = data.pop("specialRuleConfig", None) or {}
            if tag is not None:
                data["special_rule"] = _fold_special_rule(tag, config)

        for key in ("bonusType", "bonus_type"):
            tag = data.get(key)
            if isinstance(tag, str) and tag not in _BONUS_TYPE_TAGS:
                # 알 수 없는 가산 방식은 곱셈 가산으로 처리
                data[key] = BonusPolicy.MULTIPLICATIVE.value
                data["unsupported_bonus_type"] = tag

        return data

    @field_validator("bonus_type", mode="before")
    @classmethod
    def _legacy_bonus_type(cls, value: Any) -> Any:
        if value is None:
            return BonusPolicy.MULTIPLICATIVE
        if isinstance(value, str) and value in _LEGACY_BONUS_TYPES:
            return _LEGACY_BONUS_TYPES[value]
        return value

    @property
    def exp_count(self) -> Optional[int]:
        return self.restrictions.exp_count if self.restrictions else None

    @property
    def is_composite(self) -> bool:
        return isinstance(self.special_rule, COMPOSITE_RULES)


def _fold_special_rule(tag: Optional[str], config: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if not isinstance(tag, str) or tag not in _SPECIAL_RULE_CONFIG_KEYS:
        return None
    config_key = _SPECIAL_RULE_CONFIG_KEYS[tag]
    if config_key is None:
        return {"kind": tag}
    rule_config = config.get(config_key)
    if not rule_config:
        # 설정 없는 규칙은 적용하지 않음
        return None
    return {"kind": tag, **rule_config}


class UnivRule(_Model):
    formulas: List[ScoringFormula] = Field(default_factory=list)

    def get(self, formula_id: Optional[str]) -> Optional[ScoringFormula]:
        if not formula_id:
            return None
        for formula in self.formulas:
            if formula.id == formula_id:
                return formula
        return None


class RulesData(_Model):
    version: str = ""
    rules: Dict[str, UnivRule] = Field(default_factory=dict)


# ============================================================
# 모집단위 (입결 행)
# ============================================================
class AdmissionRow(_Model):
    univ_name: str
    dept_name: str = ""
    scoring_class: str = ""  # 사용할 공식 ID
    group: str = ""          # 군 (가/나/다)
    recruitment_count: Optional[int] = None  # 구버전 최초 모집 인원
    initial_recruitment_count: Optional[int] = None
    early_admission_carryover: Optional[int] = None
    final_recruitment_count: Optional[int] = None
    last_year_competition_rate: Optional[float] = None
    safe_cut: float = 0
    match_cut: float = 0
    upward_cut: float = 0

    @property
    def initial_count(self) -> int:
        if self.initial_recruitment_count is not None:
            return self.initial_recruitment_count
        if self.recruitment_count is not None:
            return self.recruitment_count
        return 0

    @property
    def carryover_count(self) -> int:
        return self.early_admission_carryover or 0

    @property
    def final_count(self) -> int:
        return self.initial_count + self.carryover_count


# ============================================================
# 계산 결과
# ============================================================
class SubjectDetail(_Model):
    raw: float = 0     # 사용한 환산값 (표준점수/백분위/변환점수)
    weight: float = 0  # 적용 가중치
    calc: float = 0    # 최종 반영 점수


class GradeDetail(_Model):
    grade: int
    score: float = 0


class ScoreDetail(_Model):
    formula_label: str
    kor: SubjectDetail = Field(default_factory=SubjectDetail)
    math: SubjectDetail = Field(default_factory=SubjectDetail)
    exp: SubjectDetail = Field(default_factory=SubjectDetail)
    eng: GradeDetail
    hist: GradeDetail
    total: float = 0

    def relabel(self, label: str) -> "ScoreDetail":
        return self.model_copy(update={"formula_label": label})


class AdmissionStatus(str, Enum):
    SAFE = "safe"
    MATCH = "match"
    UPWARD = "upward"
    DANGER = "danger"

    @property
    def label(self) -> str:
        return {
            AdmissionStatus.SAFE: ClassificationLabel.SAFE,
            AdmissionStatus.MATCH: ClassificationLabel.MATCH,
            AdmissionStatus.UPWARD: ClassificationLabel.UPWARD,
            AdmissionStatus.DANGER: ClassificationLabel.DANGER,
        }[self]


class AnalysisResult(_Model):
    univ_name: str
    dept_name: str
    scoring_class: str
    group: str
    recruitment_count: int = 0
    initial_recruitment_count: int = 0
    early_admission_carryover: int = 0
    final_recruitment_count: int = 0
    last_year_competition_rate: float = 0
    my_score: float = 0
    safe_cut: float = 0
    match_cut: float = 0
    upward_cut: float = 0
    diff: float = 0         # 내 점수 - 상향컷
    gap_percent: float = 0  # diff / 상향컷 × 100
    status: AdmissionStatus = AdmissionStatus.DANGER
    formula_label: str = ""
    notes: List[str] = Field(default_factory=list)
