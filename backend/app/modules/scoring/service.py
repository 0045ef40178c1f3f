# modules/scoring/service.py
"""
Orchestration du scoring des questions opinatives.

Responsabilités :
1. Interroger la DB via repository (questions, config de poids, réponses)
2. Déléguer le calcul à engine/scoring/ (fonctions pures)
3. Absorber les erreurs : ces données alimentent des vues de reporting
   qui doivent toujours s'afficher, même partiellement.

Taxonomie des échecs absorbés :
    NotFound          test / candidat / étape inexistant → résultat vide
    InconsistentData  option supprimée après réponse → snapshots de la Response
    ConfigurationGap  pas de PersonalityConfig → poids calculés
"""
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.engine.scoring.aggregation import (
    aggregate_traits,
    build_response_records,
    compute_correctness,
    compute_stage_breakdown,
    pending_weight_snapshots,
)
from app.engine.scoring.profile import analyze_profile, merge_process_traits
from app.engine.scoring.traits import extract_trait
from app.engine.scoring.weights import (
    build_trait_weight_map,
    rank_trait_weights,
    resolve_option_weights as compute_option_weights,
)
from app.modules.scoring.repository import ScoringRepository
from app.shared.enums import PositionWeightPolicy

logger = logging.getLogger(__name__)

repo = ScoringRepository()


def _trait_groups(trait_weights) -> Dict[str, Dict[str, Any]]:
    return {
        tw.trait_name: {"group_id": tw.group_id, "group_name": tw.group_name}
        for tw in trait_weights or []
        if getattr(tw, "group_id", None)
    }


class ScoringService:

    # ─────────────────────────────────────────────
    # POIDS DES OPTIONS
    # ─────────────────────────────────────────────

    async def resolve_option_weights(
        self,
        db: AsyncSession,
        test_id: str,
        policy: Optional[PositionWeightPolicy] = None,
    ) -> Dict[str, float]:
        """
        {option_id: poids} pour toutes les options opinatives du test.
        Recalculé à chaque appel, jamais persisté.
        """
        try:
            test = await repo.get_test(db, test_id)
            if not test:
                logger.warning("Option weights: test %s introuvable", test_id)
                return {}

            questions = await repo.get_opinion_questions(db, [test_id])
            if not questions:
                logger.info("Option weights: aucune question opinative pour le test %s", test_id)
                return {}

            stage = await repo.get_primary_process_stage(db, test_id)
        except SQLAlchemyError:
            logger.exception("Option weights: échec de lecture pour le test %s", test_id)
            return {}

        trait_weights = self._stage_trait_weights(stage)
        if not trait_weights:
            logger.info("Option weights: pas de config de traits pour le test %s, poids calculés", test_id)

        return compute_option_weights(
            questions,
            trait_weights=build_trait_weight_map(trait_weights),
            policy=policy or settings.POSITION_WEIGHT_POLICY,
        )

    # ─────────────────────────────────────────────
    # AGRÉGATION CANDIDAT
    # ─────────────────────────────────────────────

    async def aggregate_candidate_traits(
        self,
        db: AsyncSession,
        candidate_id: str,
        option_weights: Dict[str, float],
    ) -> Dict[str, Dict[str, float]]:
        """{trait: {total_weight, response_count, average_weight}}"""
        responses = await self._load_responses(db, candidate_id)
        if responses is None:
            return {}
        await self._freeze_weights(db, responses, option_weights)
        return aggregate_traits(responses, option_weights)

    async def get_candidate_traits(
        self,
        db: AsyncSession,
        candidate_id: str,
        test_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Profil de traits d'un candidat. Sans test_id explicite, le test est
        celui du candidat, sinon le premier test de son processus.
        """
        result: Dict[str, Any] = {"candidate_id": candidate_id, "test_id": test_id, "traits": {}}

        if test_id is None:
            try:
                candidate = await repo.get_candidate(db, candidate_id)
                if not candidate:
                    logger.warning("Traits: candidat %s introuvable", candidate_id)
                    return result
                test_id = await self._candidate_test_id(db, candidate)
            except SQLAlchemyError:
                logger.exception("Traits: échec de lecture pour le candidat %s", candidate_id)
                return result

        option_weights = await self.resolve_option_weights(db, test_id) if test_id else {}
        result["test_id"] = test_id
        result["traits"] = await self.aggregate_candidate_traits(db, candidate_id, option_weights)
        return result

    async def compute_correctness_score(
        self, db: AsyncSession, candidate_id: str
    ) -> Dict[str, float]:
        """{total_correct, total_answered, ratio, percentage} — indépendant des traits."""
        responses = await self._load_responses(db, candidate_id)
        return compute_correctness(responses or [])

    async def get_candidate_report(
        self, db: AsyncSession, candidate_id: str
    ) -> Dict[str, Any]:
        """
        Rapport complet : profil de traits ET exactitude, côte à côte,
        jamais combinés en un score unique.
        """
        report: Dict[str, Any] = {
            "candidate_id": candidate_id,
            "test_id": None,
            "option_weights_count": 0,
            "traits": {},
            "profile": analyze_profile({}),
            "correctness": compute_correctness([]),
            "stages": [],
        }

        try:
            candidate = await repo.get_candidate(db, candidate_id)
            if not candidate:
                logger.warning("Rapport: candidat %s introuvable", candidate_id)
                return report

            test_id = await self._candidate_test_id(db, candidate)
            responses = await repo.get_candidate_responses(db, candidate_id)
            stage = await repo.get_primary_process_stage(db, test_id) if test_id else None
        except SQLAlchemyError:
            logger.exception("Rapport: échec de lecture pour le candidat %s", candidate_id)
            return report

        option_weights = await self.resolve_option_weights(db, test_id) if test_id else {}
        await self._freeze_weights(db, responses, option_weights)
        records = build_response_records(responses)
        trait_weights = self._stage_trait_weights(stage)
        traits = aggregate_traits(records, option_weights)

        report.update({
            "test_id": test_id,
            "option_weights_count": len(option_weights),
            "traits": traits,
            "profile": analyze_profile(
                traits,
                trait_weights=build_trait_weight_map(trait_weights),
                trait_groups=_trait_groups(trait_weights),
            ),
            "correctness": compute_correctness(records),
            "stages": compute_stage_breakdown(records),
        })
        return report

    # ─────────────────────────────────────────────
    # CONFIGURATION DES TRAITS (admin)
    # ─────────────────────────────────────────────

    async def list_process_traits(
        self, db: AsyncSession, process_id: str
    ) -> Optional[List[Dict[str, Any]]]:
        """None si le processus n'existe pas, [] si la lecture échoue."""
        try:
            process = await repo.get_process_with_stages(db, process_id)
            if not process:
                logger.warning("Catalogue: processus %s introuvable", process_id)
                return None

            stage_configs = [
                stage.personality_config.trait_weights
                for stage in process.stages
                if stage.personality_config
            ]
            test_ids = [stage.test_id for stage in process.stages if stage.test_id]
            questions = await repo.get_opinion_questions(db, test_ids)
        except SQLAlchemyError:
            logger.exception("Catalogue: échec de lecture pour le processus %s", process_id)
            return []

        discovered: List[str] = []
        for question in questions:
            for option in question.options:
                label = extract_trait(option)
                if label and label not in discovered:
                    discovered.append(label)

        return merge_process_traits(stage_configs, discovered)

    async def save_trait_weights(
        self, db: AsyncSession, stage_id: str, groups: List[Dict[str, Any]]
    ):
        """
        groups : [{"group_id", "group_name", "traits": [noms ordonnés]}]
        Le rang dans le groupe détermine le poids (1er = 5, dernier = 1).
        """
        stage = await repo.get_process_stage(db, stage_id)
        if not stage:
            raise ValueError("Étape de processus introuvable.")

        rows: List[Dict[str, Any]] = []
        seen = set()
        for group in groups:
            for row in rank_trait_weights(group.get("traits") or []):
                if row["trait_name"] in seen:
                    raise ValueError(f"Trait en double : {row['trait_name']}")
                seen.add(row["trait_name"])
                rows.append({
                    **row,
                    "group_id": group.get("group_id"),
                    "group_name": group.get("group_name"),
                })

        if not rows:
            raise ValueError("Aucun trait fourni.")

        config = await repo.replace_trait_weights(db, stage, rows)
        logger.info("Config de traits de l'étape %s remplacée (%d traits)", stage_id, len(rows))
        return config

    # ─────────────────────────────────────────────
    # INTERNALS
    # ─────────────────────────────────────────────

    @staticmethod
    def _stage_trait_weights(stage) -> List:
        if stage is None or stage.personality_config is None:
            return []
        return list(stage.personality_config.trait_weights or [])

    @staticmethod
    async def _candidate_test_id(db: AsyncSession, candidate) -> Optional[str]:
        if candidate.test_id:
            return candidate.test_id
        if candidate.process_id:
            return await repo.get_first_test_id_for_process(db, candidate.process_id)
        return None

    @staticmethod
    async def _freeze_weights(db: AsyncSession, responses: List, option_weights: Dict[str, float]) -> None:
        """Fige sur les réponses le poids courant de leur option (une seule fois)."""
        pending = pending_weight_snapshots(responses, option_weights)
        if not pending:
            return
        try:
            await repo.save_response_weights(db, responses, pending)
            logger.info("%d poids d'option figés", len(pending))
        except SQLAlchemyError:
            logger.exception("Échec de l'enregistrement des poids figés")

    async def _load_responses(self, db: AsyncSession, candidate_id: str) -> Optional[List]:
        try:
            candidate = await repo.get_candidate(db, candidate_id)
            if not candidate:
                logger.warning("Candidat %s introuvable", candidate_id)
                return None
            return await repo.get_candidate_responses(db, candidate_id)
        except SQLAlchemyError:
            logger.exception("Échec de lecture des réponses du candidat %s", candidate_id)
            return None
