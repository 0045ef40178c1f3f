# engine/scoring/traits.py
"""
Extraction du trait de personnalité porté par une option — ZÉRO accès DB.

Deux sources possibles, dans cet ordre :
    1. Champ structuré `trait_label` (non vide)
    2. Parenthèse finale du texte : "Texto da opção (Nome do traço)"

Les anciennes options ne stockaient le trait que dans le texte libre ;
les deux chemins restent supportés pour les réponses déjà enregistrées.

Le résultat est un TraitSource, résolu une seule fois à l'ingestion
(voir OptionView) et jamais re-parsé pendant l'agrégation.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Optional

from app.shared.enums import TraitSourceKind

# Contenu d'une parenthèse sans parenthèse imbriquée
_PARENTHETICAL = re.compile(r"\(([^()]*)\)")


@dataclass(frozen=True)
class TraitSource:
    """Explicit(label) | ParsedFromText(label) | Unknown."""
    kind:  TraitSourceKind
    label: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.kind != TraitSourceKind.UNKNOWN


UNKNOWN_TRAIT = TraitSource(TraitSourceKind.UNKNOWN)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_trait_from_text(text: Optional[str]) -> Optional[str]:
    """Contenu de la DERNIÈRE parenthèse non vide du texte, ou None."""
    if not text:
        return None
    for candidate in reversed(_PARENTHETICAL.findall(text)):
        label = candidate.strip()
        if label:
            return label
    return None


def resolve_trait_source(trait_label: Optional[str], text: Optional[str]) -> TraitSource:
    explicit = _clean(trait_label)
    if explicit:
        return TraitSource(TraitSourceKind.EXPLICIT, explicit)

    parsed = parse_trait_from_text(text)
    if parsed:
        return TraitSource(TraitSourceKind.PARSED_FROM_TEXT, parsed)

    return UNKNOWN_TRAIT


def extract_trait(option: Any) -> Optional[str]:
    """
    Trait d'une option (ORM, SimpleNamespace ou dict) ou None.
    Idempotent : aucune mutation de l'option.
    """
    if option is None:
        return None
    if isinstance(option, dict):
        label, text = option.get("trait_label"), option.get("text")
    else:
        label, text = getattr(option, "trait_label", None), getattr(option, "text", None)
    return resolve_trait_source(label, text).label
