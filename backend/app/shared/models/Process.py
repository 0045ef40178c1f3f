# app/models/process.py
"""
Processus de sélection et configuration des poids de traits.

SelectionProcess → ProcessStage (→ Test) → PersonalityConfig → TraitWeight

Une PersonalityConfig, quand elle existe, fait autorité sur les poids
calculés des options (voir engine/scoring/weights.py).
"""
import uuid

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class SelectionProcess(Base):
    __tablename__ = "selection_processes"
    id         = Column(String(36), primary_key=True, default=_uuid)
    name       = Column(String, nullable=False)
    company_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    stages = relationship("ProcessStage", back_populates="process", order_by="ProcessStage.order")

    def __repr__(self):
        return f"<SelectionProcess id={self.id} name={self.name}>"


class ProcessStage(Base):
    __tablename__ = "process_stages"
    id         = Column(String(36), primary_key=True, default=_uuid)
    process_id = Column(String(36), ForeignKey("selection_processes.id"), nullable=False, index=True)
    test_id    = Column(String(36), ForeignKey("tests.id"), nullable=True, index=True)
    name       = Column(String, nullable=False)
    order      = Column(Integer, default=0)

    process            = relationship("SelectionProcess", back_populates="stages")
    test               = relationship("Test", back_populates="process_stages")
    personality_config = relationship(
        "PersonalityConfig", back_populates="process_stage",
        uselist=False, cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<ProcessStage id={self.id} test={self.test_id}>"


class PersonalityConfig(Base):
    __tablename__ = "personality_configs"
    id               = Column(String(36), primary_key=True, default=_uuid)
    process_stage_id = Column(String(36), ForeignKey("process_stages.id", ondelete="CASCADE"), unique=True, nullable=False)
    updated_at       = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    process_stage = relationship("ProcessStage", back_populates="personality_config")
    trait_weights = relationship(
        "TraitWeight", back_populates="config",
        cascade="all, delete-orphan", order_by="TraitWeight.order",
    )


class TraitWeight(Base):
    __tablename__ = "trait_weights"
    id         = Column(String(36), primary_key=True, default=_uuid)
    config_id  = Column(String(36), ForeignKey("personality_configs.id", ondelete="CASCADE"), nullable=False, index=True)
    trait_name = Column(String, nullable=False)
    weight     = Column(Float, nullable=False)     # Convention 1–5, non contraint
    order      = Column(Integer, default=0)
    group_id   = Column(String, nullable=True)
    group_name = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("config_id", "trait_name", name="uq_config_trait"),
    )

    config = relationship("PersonalityConfig", back_populates="trait_weights")

    def __repr__(self):
        return f"<TraitWeight {self.trait_name}={self.weight}>"
