# app/modules/scoring/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict


# ── Poids des options ──────────────────────────────────────

class OptionWeightsOut(BaseModel):
    test_id: str
    option_weights: Dict[str, float]


# ── Profil de traits ───────────────────────────────────────

class TraitAggregateOut(BaseModel):
    total_weight: float
    response_count: int
    average_weight: float


class CandidateTraitsOut(BaseModel):
    candidate_id: str
    test_id: Optional[str] = None
    traits: Dict[str, TraitAggregateOut]


class TraitProfileRowOut(BaseModel):
    trait: str
    count: int
    percentage: float
    group_percentage: Optional[float] = None
    weight: float
    weighted_score: float
    group_id: Optional[str] = None
    group_name: Optional[str] = None


class PersonalityProfileOut(BaseModel):
    traits: List[TraitProfileRowOut] = []
    dominant_traits: List[str] = []
    dominant_by_group: Dict[str, str] = {}
    total_responses: int = 0
    has_trait_weights: bool = False
    weighted_score: float = 0.0


# ── Exactitude ─────────────────────────────────────────────

class CorrectnessOut(BaseModel):
    total_correct: int
    total_answered: int
    ratio: float
    percentage: float


class StageCorrectnessOut(CorrectnessOut):
    stage_id: Optional[str] = None
    stage_name: Optional[str] = None


class CandidateCorrectnessOut(CorrectnessOut):
    candidate_id: str


# ── Rapport ────────────────────────────────────────────────

class CandidateReportOut(BaseModel):
    candidate_id: str
    test_id: Optional[str] = None
    option_weights_count: int = 0
    traits: Dict[str, TraitAggregateOut]          # dimension personnalité
    profile: PersonalityProfileOut
    correctness: CorrectnessOut                   # dimension exactitude
    stages: List[StageCorrectnessOut] = []


# ── Configuration des traits ───────────────────────────────

class ProcessTraitOut(BaseModel):
    name: str
    weight: float
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    configured: bool


class TraitGroupIn(BaseModel):
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    traits: List[str] = Field(..., min_length=1, description="Traits du plus au moins important")


class TraitWeightsIn(BaseModel):
    groups: List[TraitGroupIn] = Field(..., min_length=1)


class TraitWeightOut(BaseModel):
    trait_name: str
    weight: float
    order: int
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class PersonalityConfigOut(BaseModel):
    id: str
    process_stage_id: str
    trait_weights: List[TraitWeightOut]
    model_config = ConfigDict(from_attributes=True)
