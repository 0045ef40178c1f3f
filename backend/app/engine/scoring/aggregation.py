# engine/scoring/aggregation.py
"""
Agrégation des réponses d'un candidat — ZÉRO accès DB.

Deux dimensions ORTHOGONALES, jamais fusionnées en un score unique :
    - profil de traits   : {trait: {total_weight, response_count, average_weight}}
    - exactitude         : {total_correct, total_answered, ratio}

Règle d'intégrité : les champs snapshot de la Response font foi.
L'état vivant de Question / Option n'est consulté qu'en l'absence de snapshot
(une option supprimée après coup ne doit jamais faire disparaître une réponse).
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from app.engine.scoring.traits import (
    TraitSource,
    UNKNOWN_TRAIT,
    parse_trait_from_text,
    resolve_trait_source,
)
from app.engine.scoring.weights import DEFAULT_WEIGHT
from app.shared.enums import QuestionType, TraitSourceKind


# ── Normalisation à l'ingestion ───────────────────────────────────────────────

@dataclass(frozen=True)
class ResponseRecord:
    """
    Réponse normalisée une seule fois : tous les "coalesce" sont faits ici,
    les calculs en aval ne touchent plus jamais aux relations ORM.
    """
    id:            str
    question_id:   Optional[str]
    option_id:     Optional[str]
    question_text: Optional[str]
    option_text:   Optional[str]
    question_type: Optional[QuestionType]
    is_correct:    Optional[bool]      # None = non évaluable
    trait:         TraitSource
    stage_id:      Optional[str]
    stage_name:    Optional[str]
    option_weight: Optional[float]     # poids figé au premier calcul
    answered_at:   Optional[datetime]

    @property
    def trait_label(self) -> Optional[str]:
        return self.trait.label

    @property
    def is_opinion(self) -> bool:
        if self.question_type is not None:
            return self.question_type == QuestionType.OPINION_MULTIPLE
        # Type inconnu (question supprimée, pas de snapshot) : le trait tranche
        return self.trait.is_known

    @property
    def is_evaluable(self) -> bool:
        return self.is_correct is not None

    @classmethod
    def from_response(cls, response: Any) -> "ResponseRecord":
        question = getattr(response, "question", None)
        option = getattr(response, "option", None)

        option_id = getattr(response, "option_id", None) or getattr(option, "id", None)
        question_id = getattr(response, "question_id", None) or getattr(question, "id", None)

        return cls(
            id=str(getattr(response, "id", "") or ""),
            question_id=str(question_id) if question_id else None,
            option_id=str(option_id) if option_id else None,
            question_text=_first(getattr(response, "question_text", None), getattr(question, "text", None)),
            option_text=_first(getattr(response, "option_text", None), getattr(option, "text", None)),
            question_type=_coerce_question_type(
                getattr(response, "question_type", None) or getattr(question, "type", None)
            ),
            is_correct=_resolve_correctness(response, option),
            trait=_resolve_response_trait(response, option),
            stage_id=_first(getattr(response, "stage_id", None), getattr(question, "stage_id", None)),
            stage_name=_first(getattr(response, "stage_name", None), _stage_title(question)),
            option_weight=_coerce_weight(getattr(response, "option_weight", None)),
            answered_at=getattr(response, "created_at", None),
        )


def build_response_records(responses: Optional[Iterable[Any]]) -> List[ResponseRecord]:
    return [
        r if isinstance(r, ResponseRecord) else ResponseRecord.from_response(r)
        for r in (responses or [])
        if r is not None
    ]


def _first(*values: Any) -> Optional[str]:
    for value in values:
        if value is not None and str(value).strip():
            return str(value)
    return None


def _stage_title(question: Any) -> Optional[str]:
    stage = getattr(question, "stage", None)
    return getattr(stage, "title", None) if stage is not None else None


def _coerce_question_type(value: Any) -> Optional[QuestionType]:
    if value is None:
        return None
    if isinstance(value, QuestionType):
        return value
    try:
        return QuestionType(str(value))
    except ValueError:
        return None


def _coerce_weight(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _resolve_correctness(response: Any, option: Any) -> Optional[bool]:
    """Snapshot is_correct → option vivante → None (exclu du dénominateur)."""
    snapshot = getattr(response, "is_correct", None)
    if snapshot is not None:
        return bool(snapshot)
    if option is not None and getattr(option, "is_correct", None) is not None:
        return bool(option.is_correct)
    return None


def _resolve_response_trait(response: Any, option: Any) -> TraitSource:
    """
    1. snapshot trait_label de la réponse
    2. parenthèse du snapshot option_text
    3. option vivante, seulement si aucun snapshot ne donne de trait
    """
    snapshot = (getattr(response, "trait_label", None) or "").strip()
    if snapshot:
        return TraitSource(TraitSourceKind.EXPLICIT, snapshot)

    parsed = parse_trait_from_text(getattr(response, "option_text", None))
    if parsed:
        return TraitSource(TraitSourceKind.PARSED_FROM_TEXT, parsed)

    if option is not None:
        return resolve_trait_source(getattr(option, "trait_label", None), getattr(option, "text", None))
    return UNKNOWN_TRAIT


# ── Profil de traits ──────────────────────────────────────────────────────────

@dataclass
class TraitBucket:
    total_weight:   float = 0.0
    response_count: int = 0

    @property
    def average_weight(self) -> float:
        return self.total_weight / self.response_count if self.response_count else 0.0

    def add(self, weight: float) -> None:
        self.total_weight += weight
        self.response_count += 1

    def to_dict(self) -> Dict[str, float]:
        return {
            "total_weight": self.total_weight,
            "response_count": self.response_count,
            "average_weight": self.average_weight,
        }


def response_weight(record: ResponseRecord, option_weights: Mapping[str, float]) -> float:
    """Poids figé sur la réponse → table recalculée → DEFAULT_WEIGHT."""
    if record.option_weight is not None:
        return record.option_weight
    if record.option_id is None:
        return float(DEFAULT_WEIGHT)
    weight = option_weights.get(record.option_id)
    return float(weight) if weight is not None else float(DEFAULT_WEIGHT)


def pending_weight_snapshots(
    responses: Iterable[Any],
    option_weights: Optional[Mapping[str, float]] = None,
) -> Dict[str, float]:
    """
    {response_id: poids} à figer sur les réponses opinatives qui n'ont pas
    encore de poids et dont l'option figure dans la table courante.

    Une fois figé, le poids ne dépend plus de la liste d'options vivante
    (suppression de l'option choisie ou d'une option sœur).
    """
    weights = option_weights or {}
    pending: Dict[str, float] = {}
    for record in build_response_records(responses):
        if not record.id or record.option_weight is not None or not record.is_opinion:
            continue
        weight = weights.get(record.option_id) if record.option_id else None
        if weight is not None:
            pending[record.id] = float(weight)
    return pending


def aggregate_traits(
    responses: Iterable[Any],
    option_weights: Optional[Mapping[str, float]] = None,
) -> Dict[str, Dict[str, float]]:
    """
    Cumule les poids des réponses opinatives par trait.

    Réponses sans trait résolvable → ignorées (elles n'appartiennent à aucune
    dimension de personnalité). Poids inconnu → DEFAULT_WEIGHT (3).
    Ordre des traits = ordre de première apparition.
    """
    weights = option_weights or {}
    buckets: Dict[str, TraitBucket] = {}

    for record in build_response_records(responses):
        if not record.is_opinion or record.trait_label is None:
            continue
        buckets.setdefault(record.trait_label, TraitBucket()).add(response_weight(record, weights))

    return {trait: bucket.to_dict() for trait, bucket in buckets.items()}


# ── Exactitude ────────────────────────────────────────────────────────────────

def _ratio_block(correct: int, answered: int) -> Dict[str, float]:
    ratio = correct / answered if answered else 0.0
    return {
        "total_correct": correct,
        "total_answered": answered,
        "ratio": ratio,
        "percentage": round(ratio * 100, 1),
    }


def compute_correctness(responses: Iterable[Any]) -> Dict[str, float]:
    """
    total_correct / total_answered sur les réponses NON opinatives évaluables.
    Une réponse sans option ni snapshot de correction sort du dénominateur.
    """
    correct = answered = 0
    for record in build_response_records(responses):
        if record.is_opinion or not record.is_evaluable:
            continue
        answered += 1
        if record.is_correct:
            correct += 1
    return _ratio_block(correct, answered)


def compute_stage_breakdown(responses: Iterable[Any]) -> List[Dict[str, Any]]:
    """Exactitude par étape de contenu, dans l'ordre de première réponse."""
    stages: Dict[str, Dict[str, Any]] = {}
    for record in build_response_records(responses):
        if record.is_opinion or not record.is_evaluable:
            continue
        key = record.stage_id or "unknown"
        entry = stages.setdefault(key, {
            "stage_id": record.stage_id,
            "stage_name": record.stage_name,
            "correct": 0,
            "answered": 0,
        })
        if entry["stage_name"] is None and record.stage_name:
            entry["stage_name"] = record.stage_name
        entry["answered"] += 1
        if record.is_correct:
            entry["correct"] += 1

    breakdown = []
    for entry in stages.values():
        block = _ratio_block(entry["correct"], entry["answered"])
        breakdown.append({
            "stage_id": entry["stage_id"],
            "stage_name": entry["stage_name"],
            **block,
        })
    return breakdown
