# engine/scoring/weights.py
"""
Pondération des options des questions opinatives — ZÉRO accès DB.
Reçoit les questions déjà hydratées, retourne {option_id: poids}.

Appelé par : modules/scoring/service.py

Chaîne de résolution (première stratégie qui répond gagne) :

    ┌──────────────────────────────────────────────────────────────┐
    │ 1. CONFIGURED  trait de l'option présent dans la config      │
    │                de l'étape de processus → poids admin         │
    │ 2. ID_SUFFIX   dernier caractère de l'id ∈ [1..5]            │
    │                (ids seedés avec un rang volontaire)          │
    │ 3. POSITION    position de l'option dans sa question         │
    │                LEGACY : clamp(n − index0, 1, 5)              │
    │                LINEAR : normalize_rank_weight(pos, n)        │
    │ 4. DEFAULT     3 (milieu d'échelle)                          │
    └──────────────────────────────────────────────────────────────┘

La table n'est jamais persistée : recalculée à chaque requête
(quelques centaines d'options au maximum).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from app.engine.scoring.traits import TraitSource, resolve_trait_source
from app.shared.enums import PositionWeightPolicy

# --- BORNES ---
W_MIN = 1
W_MAX = 5
DEFAULT_WEIGHT = 3
RANK_DIGITS = range(W_MIN, W_MAX + 1)
RANK_SUFFIXES = frozenset(str(d) for d in RANK_DIGITS)   # ASCII uniquement


def _clamp(value: float, low: float = W_MIN, high: float = W_MAX) -> float:
    return max(low, min(high, value))


# ── Weight Normalizer ─────────────────────────────────────────────────────────

def normalize_rank_weight(position: int, group_size: int) -> float:
    """
    Interpolation linéaire rang → poids dans [W_MIN, W_MAX].
    Rang 1 = W_MAX, dernier rang = W_MIN, rangs intermédiaires équidistants.

    Entrées dégénérées (group_size ≤ 1, position hors bornes) :
    le clamp renvoie une valeur bornée, jamais d'exception.
    """
    if group_size <= 1:
        return float(W_MAX)
    step = (W_MAX - W_MIN) / (group_size - 1)
    return float(_clamp(W_MAX - (position - 1) * step))


def legacy_position_weight(position: int, group_size: int) -> float:
    """Règle historique de l'endpoint option-weights : clamp(n − index0, 1, 5)."""
    return float(_clamp(group_size - (position - 1)))


POSITION_RULES: Dict[PositionWeightPolicy, Callable[[int, int], float]] = {
    PositionWeightPolicy.LEGACY: legacy_position_weight,
    PositionWeightPolicy.LINEAR: normalize_rank_weight,
}


# ── Représentation en mémoire ─────────────────────────────────────────────────

@dataclass(frozen=True)
class OptionView:
    """Option normalisée une fois à l'ingestion (trait résolu et mis en cache)."""
    id:         str
    text:       str
    trait:      TraitSource
    position:   Optional[int]     # 1-based, None si indéterminable
    group_size: Optional[int]

    @property
    def trait_label(self) -> Optional[str]:
        return self.trait.label


@dataclass(frozen=True)
class QuestionView:
    id:      str
    options: List[OptionView] = field(default_factory=list)


def build_question_views(questions: Iterable[Any]) -> List[QuestionView]:
    """
    ORM Question (avec .options ordonnées) → QuestionView.
    Les options sans id sont écartées : elles ne peuvent pas être référencées.
    """
    views = []
    for question in questions:
        options = [o for o in (getattr(question, "options", None) or []) if getattr(o, "id", None)]
        size = len(options)
        views.append(QuestionView(
            id=str(question.id),
            options=[
                OptionView(
                    id=str(option.id),
                    text=getattr(option, "text", None) or "",
                    trait=resolve_trait_source(
                        getattr(option, "trait_label", None),
                        getattr(option, "text", None),
                    ),
                    position=index + 1,
                    group_size=size,
                )
                for index, option in enumerate(options)
            ],
        ))
    return views


# ── Stratégies ────────────────────────────────────────────────────────────────
# Signature commune : (option, trait_weights) → poids ou None (= stratégie suivante)

WeightStrategy = Callable[[OptionView, Mapping[str, float]], Optional[float]]


def configured_trait_weight(option: OptionView, trait_weights: Mapping[str, float]) -> Optional[float]:
    label = option.trait_label
    if label is None or label not in trait_weights:
        return None
    value = trait_weights[label]
    return float(value) if value is not None else None


def id_suffix_weight(option: OptionView, trait_weights: Mapping[str, float]) -> Optional[float]:
    last_char = option.id[-1:] if option.id else ""
    if last_char in RANK_SUFFIXES:
        return float(int(last_char))
    return None


def make_position_strategy(policy: PositionWeightPolicy) -> WeightStrategy:
    rule = POSITION_RULES[policy]

    def position_weight(option: OptionView, trait_weights: Mapping[str, float]) -> Optional[float]:
        if not option.position or not option.group_size:
            return None
        return rule(option.position, option.group_size)

    position_weight.__name__ = f"position_weight_{policy.value}"
    return position_weight


def default_weight(option: OptionView, trait_weights: Mapping[str, float]) -> Optional[float]:
    return float(DEFAULT_WEIGHT)


def build_strategy_chain(policy: PositionWeightPolicy = PositionWeightPolicy.LEGACY) -> List[WeightStrategy]:
    return [
        configured_trait_weight,
        id_suffix_weight,
        make_position_strategy(policy),
        default_weight,
    ]


def weigh_option(
    option: OptionView,
    trait_weights: Mapping[str, float],
    chain: Sequence[WeightStrategy],
) -> float:
    for strategy in chain:
        weight = strategy(option, trait_weights)
        if weight is not None:
            return weight
    return float(DEFAULT_WEIGHT)


# ── Option-Weight Resolver ────────────────────────────────────────────────────

def build_trait_weight_map(trait_weights: Optional[Iterable[Any]]) -> Dict[str, float]:
    """TraitWeight ORM (trait_name, weight) → {trait_name: weight}. Vide si pas de config."""
    mapping: Dict[str, float] = {}
    for tw in trait_weights or []:
        name = (getattr(tw, "trait_name", None) or "").strip()
        weight = getattr(tw, "weight", None)
        if name and weight is not None:
            mapping[name] = float(weight)
    return mapping


def resolve_option_weights(
    questions: Iterable[Any],
    trait_weights: Optional[Mapping[str, float]] = None,
    policy: PositionWeightPolicy = PositionWeightPolicy.LEGACY,
) -> Dict[str, float]:
    """
    Calcule {option_id: poids} pour toutes les options des questions opinatives.

    questions     : Questions ORM (ou QuestionView) dans l'ordre de création,
                    options ordonnées
    trait_weights : {trait: poids} de la config de l'étape, {} / None si absente
    policy        : règle positionnelle (voir PositionWeightPolicy)
    """
    questions = list(questions or [])
    if all(isinstance(q, QuestionView) for q in questions):
        views = questions
    else:
        views = build_question_views(questions)

    chain = build_strategy_chain(policy)
    config = trait_weights or {}

    weights: Dict[str, float] = {}
    for question in views:
        for option in question.options:
            weights[option.id] = weigh_option(option, config, chain)
    return weights


# ── Configuration des poids par rang (écran admin) ────────────────────────────

def rank_trait_weights(ordered_traits: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Liste ordonnée de traits d'un groupe → [{trait_name, weight, order}].
    Le premier trait reçoit W_MAX, le dernier W_MIN (normalize_rank_weight).
    Doublons et libellés vides ignorés, l'ordre de première apparition est conservé.
    """
    seen: List[str] = []
    for name in ordered_traits:
        label = (name or "").strip()
        if label and label not in seen:
            seen.append(label)

    size = len(seen)
    return [
        {
            "trait_name": label,
            "weight": round(normalize_rank_weight(position, size), 2),
            "order": position,
        }
        for position, label in enumerate(seen, start=1)
    ]
