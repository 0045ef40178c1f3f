# app/shared/models/__init__.py
"""
Point d'entrée unique pour tous les modèles SQLAlchemy.

TOUJOURS importer les modèles depuis ce fichier :
  from app.shared.models import Candidate, Response, ...

→ Garantit que tous les modèles sont enregistrés dans Base.metadata
  avant la création des tables (Alembic, create_all).
"""

from app.shared.models.User      import User
from app.shared.models.Test      import Test, Stage, Question, Option
from app.shared.models.Process   import SelectionProcess, ProcessStage, PersonalityConfig, TraitWeight
from app.shared.models.Candidate import Candidate, Response

__all__ = [
    # User
    "User",
    # Contenu
    "Test", "Stage", "Question", "Option",
    # Processus
    "SelectionProcess", "ProcessStage", "PersonalityConfig", "TraitWeight",
    # Candidat
    "Candidate", "Response",
]
