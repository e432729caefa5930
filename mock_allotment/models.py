from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SafetyLevel = Literal["safe", "moderate", "risky", "unknown"]


class _CamelModel(BaseModel):
    """Immutable model serialized with camelCase field names."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class CutoffEntry(BaseModel):
    """One historical closing rank for a college/course/category/round"""

    model_config = ConfigDict(frozen=True)

    institute_code: str = Field(..., description="Institute code (e.g., E001)")
    institute: str = Field("", description="Institute display name")
    course: str = Field(..., description="Raw program name as published")
    category: str = Field(..., description="Reservation category code (e.g., GM, 2A)")
    cutoff_rank: int = Field(..., description="Worst rank admitted")
    year: str = Field(..., description="Admission year")
    round: str = Field(..., description="Round label (e.g., Round 1)")


class PreferenceOption(_CamelModel):
    id: str = Field(..., description="Client-side identifier of the option")
    college_code: str = Field(..., description="Institute code")
    branch_code: str = Field("", description="Two-letter course code, if known")
    college_name: str = Field("", description="Institute display name")
    branch_name: str = Field("", description="Program name")
    priority: int = Field(..., description="1-based position in the choice list")


class EligibilityDetail(_CamelModel):
    preference: PreferenceOption
    preference_number: int
    cutoff_rank: Optional[int] = None
    is_eligible: bool
    reason: str


class RoundResult(_CamelModel):
    round: str
    allotted_college: Optional[PreferenceOption] = None
    allotted_preference_number: Optional[int] = None
    cutoff_rank: Optional[int] = None
    eligibility_details: List[EligibilityDetail] = Field(default_factory=list)


class BestOutcome(_CamelModel):
    round: str
    college: PreferenceOption
    preference_number: int


class SimulationSummary(_CamelModel):
    best_outcome: Optional[BestOutcome] = None
    total_rounds_with_allotment: int = 0
    consistent_allotment: bool = False
    recommended_round: Optional[str] = None


class InputDetails(_CamelModel):
    user_rank: int
    category: str
    year: str
    total_preferences: int


class SimulationResult(_CamelModel):
    round_results: List[RoundResult]
    summary: SimulationSummary
    input_details: InputDetails


class SimulationInput(_CamelModel):
    user_rank: int = Field(..., gt=0, description="KCET rank")
    category: str = Field(..., description="Category (e.g., GM, 2A, SC)")
    year: str = Field(..., description="Cutoff year to simulate against")
    preferences: List[PreferenceOption] = Field(default_factory=list)


class SafetyRequest(SimulationInput):
    pass


class PreferenceSafety(_CamelModel):
    preference_id: str
    preference_number: int
    level: SafetyLevel


class CollegeInfo(_CamelModel):
    code: str
    name: str


class DatasetMetadata(_CamelModel):
    years: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    colleges: List[CollegeInfo] = Field(default_factory=list)
    branches: List[str] = Field(default_factory=list)
    courses: List[str] = Field(default_factory=list)
    total_records: int = 0
