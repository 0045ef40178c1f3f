# app/shared/enums.py
"""
Toutes les énumérations du projet.

Source unique de vérité pour les rôles, types de question et politiques de scoring.
Importé par les modèles, schemas, services et engine.
"""

from enum import Enum

class UserRole(str, Enum):
    ADMIN         = "ADMIN"
    SUPER_ADMIN   = "SUPER_ADMIN"
    COMPANY_ADMIN = "COMPANY_ADMIN"
    USER          = "USER"


ADMIN_ROLES = (UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.COMPANY_ADMIN)


class QuestionType(str, Enum):
    MULTIPLE_CHOICE  = "MULTIPLE_CHOICE"
    OPINION_MULTIPLE = "OPINION_MULTIPLE"   # Chaque option ↔ un trait de personnalité
    ESSAY            = "ESSAY"


class TraitSourceKind(str, Enum):
    EXPLICIT         = "explicit"           # Champ trait_label renseigné
    PARSED_FROM_TEXT = "parsed_from_text"   # "Texte (Trait)"
    UNKNOWN          = "unknown"


class PositionWeightPolicy(str, Enum):
    LEGACY = "legacy"   # clamp(n − index0, 1, 5) — comportement historique
    LINEAR = "linear"   # normalize_rank_weight(position, n) — 1 → 5, n → 1
