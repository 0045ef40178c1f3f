# modules/scoring/router.py
"""
Endpoints de scoring des questions opinatives (back-office).
Poids des options → Profil de traits → Exactitude → Rapport

Règle : ce fichier ne touche jamais la DB ni l'engine.
Tout passe par scoring_service.

Les endpoints de lecture répondent toujours 200 : un candidat ou un test
introuvable donne un résultat vide, jamais une erreur bloquante.
"""
from fastapi import APIRouter, HTTPException, status
from typing import List, Optional

from app.shared.deps import DbDep, AdminDep
from app.modules.scoring.service import ScoringService
from app.modules.scoring.schemas import (
    OptionWeightsOut,
    CandidateTraitsOut,
    CandidateCorrectnessOut,
    CandidateReportOut,
    ProcessTraitOut,
    TraitWeightsIn,
    PersonalityConfigOut,
)

router = APIRouter(prefix="/scoring", tags=["Scoring"])
service = ScoringService()


# ─────────────────────────────────────────────
# POIDS DES OPTIONS
# ─────────────────────────────────────────────

@router.get(
    "/option-weights/{test_id}",
    response_model=OptionWeightsOut,
    summary="Poids des options opinatives d'un test",
)
async def get_option_weights(test_id: str, db: DbDep, admin: AdminDep):
    """Table option_id → poids, recalculée à chaque appel."""
    weights = await service.resolve_option_weights(db, test_id)
    return {"test_id": test_id, "option_weights": weights}


# ─────────────────────────────────────────────
# CANDIDAT
# ─────────────────────────────────────────────

@router.get(
    "/candidates/{candidate_id}/traits",
    response_model=CandidateTraitsOut,
    summary="Profil de traits agrégé d'un candidat",
)
async def get_candidate_traits(
    candidate_id: str, db: DbDep, admin: AdminDep, test_id: Optional[str] = None
):
    """Sans test_id : test du candidat, sinon premier test de son processus."""
    return await service.get_candidate_traits(db, candidate_id, test_id)


@router.get(
    "/candidates/{candidate_id}/correctness",
    response_model=CandidateCorrectnessOut,
    summary="Score d'exactitude d'un candidat",
)
async def get_candidate_correctness(candidate_id: str, db: DbDep, admin: AdminDep):
    score = await service.compute_correctness_score(db, candidate_id)
    return {"candidate_id": candidate_id, **score}


@router.get(
    "/candidates/{candidate_id}/report",
    response_model=CandidateReportOut,
    summary="Rapport complet d'un candidat",
)
async def get_candidate_report(candidate_id: str, db: DbDep, admin: AdminDep):
    """Profil de traits et exactitude restent deux dimensions séparées."""
    return await service.get_candidate_report(db, candidate_id)


# ─────────────────────────────────────────────
# CONFIGURATION DES TRAITS
# ─────────────────────────────────────────────

@router.get(
    "/processes/{process_id}/traits",
    response_model=List[ProcessTraitOut],
    summary="Traits d'un processus de sélection",
)
async def get_process_traits(process_id: str, db: DbDep, admin: AdminDep):
    traits = await service.list_process_traits(db, process_id)
    if traits is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Processus introuvable.")
    return traits


@router.put(
    "/process-stages/{stage_id}/trait-weights",
    response_model=PersonalityConfigOut,
    summary="Configurer les poids de traits d'une étape",
)
async def put_trait_weights(stage_id: str, payload: TraitWeightsIn, db: DbDep, admin: AdminDep):
    """
    Chaque groupe liste ses traits du plus au moins important ;
    le poids est dérivé du rang (1er = 5, dernier = 1).
    """
    try:
        return await service.save_trait_weights(
            db, stage_id, [group.model_dump() for group in payload.groups]
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
