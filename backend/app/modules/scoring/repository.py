# modules/scoring/repository.py
"""
Accès DB pour le module scoring.
Toute la logique SQL est ici — les services n'écrivent jamais de queries directes.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from typing import List, Optional, Dict, Any

from app.shared.enums import QuestionType
from app.shared.models import (
    Test, Stage, Question,
    SelectionProcess, ProcessStage, PersonalityConfig, TraitWeight,
    Candidate, Response,
)


class ScoringRepository:

    # ─────────────────────────────────────────────
    # CONTENU DES TESTS
    # ─────────────────────────────────────────────

    async def get_test(self, db: AsyncSession, test_id: str) -> Optional[Test]:
        r = await db.execute(select(Test).where(Test.id == test_id))
        return r.scalar_one_or_none()

    async def get_opinion_questions(
        self, db: AsyncSession, test_ids: List[str]
    ) -> List[Question]:
        """
        Questions OPINION_MULTIPLE des tests, options chargées et ordonnées.
        Ordre stable : étape, puis ordre de création.
        """
        if not test_ids:
            return []
        r = await db.execute(
            select(Question)
            .join(Stage, Stage.id == Question.stage_id)
            .where(
                Stage.test_id.in_(test_ids),
                Question.type == QuestionType.OPINION_MULTIPLE,
            )
            .options(selectinload(Question.options))
            .order_by(Stage.order, Question.created_at, Question.id)
        )
        return r.scalars().all()

    # ─────────────────────────────────────────────
    # CONFIGURATION DES POIDS DE TRAITS
    # ─────────────────────────────────────────────

    async def get_primary_process_stage(
        self, db: AsyncSession, test_id: str
    ) -> Optional[ProcessStage]:
        """Première étape de processus associée au test, config de poids chargée."""
        r = await db.execute(
            select(ProcessStage)
            .where(ProcessStage.test_id == test_id)
            .options(
                selectinload(ProcessStage.personality_config)
                .selectinload(PersonalityConfig.trait_weights)
            )
            .order_by(ProcessStage.order, ProcessStage.id)
            .limit(1)
        )
        return r.scalar_one_or_none()

    async def get_process_stage(
        self, db: AsyncSession, stage_id: str
    ) -> Optional[ProcessStage]:
        r = await db.execute(
            select(ProcessStage)
            .where(ProcessStage.id == stage_id)
            .options(
                selectinload(ProcessStage.personality_config)
                .selectinload(PersonalityConfig.trait_weights)
            )
        )
        return r.scalar_one_or_none()

    async def get_process_with_stages(
        self, db: AsyncSession, process_id: str
    ) -> Optional[SelectionProcess]:
        r = await db.execute(
            select(SelectionProcess)
            .where(SelectionProcess.id == process_id)
            .options(
                selectinload(SelectionProcess.stages)
                .selectinload(ProcessStage.personality_config)
                .selectinload(PersonalityConfig.trait_weights)
            )
        )
        return r.scalar_one_or_none()

    async def replace_trait_weights(
        self,
        db: AsyncSession,
        stage: ProcessStage,
        rows: List[Dict[str, Any]],
    ) -> PersonalityConfig:
        """Remplace intégralement la config de poids de l'étape."""
        config = stage.personality_config
        if config is None:
            config = PersonalityConfig(process_stage_id=stage.id)
            db.add(config)
            await db.flush()
        else:
            await db.execute(delete(TraitWeight).where(TraitWeight.config_id == config.id))

        for row in rows:
            db.add(TraitWeight(config_id=config.id, **row))

        await db.commit()
        await db.refresh(config, attribute_names=["trait_weights"])
        return config

    # ─────────────────────────────────────────────
    # CANDIDATS & RÉPONSES
    # ─────────────────────────────────────────────

    async def get_candidate(self, db: AsyncSession, candidate_id: str) -> Optional[Candidate]:
        r = await db.execute(select(Candidate).where(Candidate.id == candidate_id))
        return r.scalar_one_or_none()

    async def get_candidate_responses(
        self, db: AsyncSession, candidate_id: str
    ) -> List[Response]:
        """
        Réponses dans l'ordre chronologique.
        Les relations question / option valent None si la ligne source a été supprimée.
        """
        r = await db.execute(
            select(Response)
            .where(Response.candidate_id == candidate_id)
            .options(
                selectinload(Response.option),
                selectinload(Response.question).selectinload(Question.stage),
            )
            .order_by(Response.created_at, Response.id)
        )
        return r.scalars().all()

    async def save_response_weights(
        self,
        db: AsyncSession,
        responses: List[Response],
        weights: Dict[str, float],
    ) -> None:
        """weights : {response_id: poids}. Les réponses absentes restent intactes."""
        for response in responses:
            weight = weights.get(str(response.id))
            if weight is not None:
                response.option_weight = weight
        await db.commit()

    async def get_first_test_id_for_process(
        self, db: AsyncSession, process_id: str
    ) -> Optional[str]:
        r = await db.execute(
            select(ProcessStage.test_id)
            .where(
                ProcessStage.process_id == process_id,
                ProcessStage.test_id.is_not(None),
            )
            .order_by(ProcessStage.order, ProcessStage.id)
            .limit(1)
        )
        return r.scalar_one_or_none()
