# app/models/candidate.py
"""
Candidat et réponses.

Response porte des champs snapshot (textes, correction, trait, étape, type)
copiés au moment de la réponse : ils restent valides après édition ou
suppression de la Question / Option source.

option_weight est figé au premier calcul du profil (voir
ScoringService._freeze_weights) : la suppression ultérieure de l'option
ou d'une option sœur ne change plus le poids de la réponse.

question_id / option_id ne sont PAS des clés étrangères : l'identifiant
survit à la suppression de la ligne source (la relation devient None).
"""
import uuid

from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.shared.enums import QuestionType


def _uuid() -> str:
    return str(uuid.uuid4())


class Candidate(Base):
    __tablename__ = "candidates"
    id         = Column(String(36), primary_key=True, default=_uuid)
    name       = Column(String, nullable=True)    # Vide pour une invitation anonyme
    email      = Column(String, nullable=True, index=True)
    process_id = Column(String(36), ForeignKey("selection_processes.id"), nullable=True, index=True)
    test_id    = Column(String(36), ForeignKey("tests.id"), nullable=True, index=True)
    completed  = Column(Boolean, default=False)
    time_spent = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    responses = relationship(
        "Response", back_populates="candidate",
        order_by="Response.created_at",
    )

    def __repr__(self):
        return f"<Candidate id={self.id} completed={self.completed}>"


class Response(Base):
    __tablename__ = "responses"
    id           = Column(String(36), primary_key=True, default=_uuid)
    candidate_id = Column(String(36), ForeignKey("candidates.id"), nullable=False, index=True)
    question_id  = Column(String(36), nullable=True, index=True)
    option_id    = Column(String(36), nullable=True)

    # ── Snapshots (source de vérité pour le scoring historique)
    question_text = Column(Text, nullable=True)
    option_text   = Column(Text, nullable=True)
    question_type = Column(SAEnum(QuestionType), nullable=True)
    is_correct    = Column(Boolean, nullable=True)
    trait_label   = Column(String, nullable=True)
    stage_id      = Column(String(36), nullable=True)
    stage_name    = Column(String, nullable=True)
    option_weight = Column(Float, nullable=True)     # Figé au premier calcul du profil

    time_spent = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="responses")
    question  = relationship(
        "Question",
        primaryjoin="foreign(Response.question_id) == Question.id",
        viewonly=True,
    )
    option = relationship(
        "Option",
        primaryjoin="foreign(Response.option_id) == Option.id",
        viewonly=True,
    )

    def __repr__(self):
        return f"<Response id={self.id} candidate={self.candidate_id} trait={self.trait_label}>"
