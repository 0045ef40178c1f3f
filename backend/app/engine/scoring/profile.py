# engine/scoring/profile.py
"""
Lecture "profil de personnalité" des buckets de traits — ZÉRO accès DB.

Entrée : sortie de aggregate_traits() + config de poids de l'étape.
Sortie :
{
    "traits": [
        {"trait": "Extrovertido", "count": 2, "percentage": 66.7,
         "group_percentage": 100.0, "weight": 5.0, "weighted_score": 100.0,
         "group_id": "g1", "group_name": "Energia"},
        ...
    ],
    "dominant_traits": ["Extrovertido"],
    "dominant_by_group": {"g1": "Extrovertido"},
    "total_responses": 3,
    "has_trait_weights": True,
    "weighted_score": 60.0
}
"""
from typing import Any, Dict, List, Mapping, Optional

from app.engine.scoring.weights import W_MAX

UNCONFIGURED_TRAIT_WEIGHT = 1.0


def _trait_key(name: str) -> str:
    return (name or "").strip().lower()


def analyze_profile(
    trait_buckets: Mapping[str, Mapping[str, Any]],
    trait_weights: Optional[Mapping[str, float]] = None,
    trait_groups: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    trait_buckets : {trait: {"response_count": int, ...}}
    trait_weights : {trait: poids configuré}
    trait_groups  : {trait: {"group_id": str, "group_name": str}}

    weighted_score d'un trait = poids / poids max de son groupe × 100
    (W_MAX si le trait n'appartient à aucun groupe configuré).

    Correspondance trait ↔ config insensible à la casse : les libellés
    saisis dans les options ne suivent pas toujours la casse de la config.
    """
    weights = {_trait_key(name): value for name, value in (trait_weights or {}).items()}
    groups = {_trait_key(name): meta for name, meta in (trait_groups or {}).items()}

    counts = {
        trait: int(bucket.get("response_count", 0) or 0)
        for trait, bucket in trait_buckets.items()
    }
    total = sum(counts.values())

    group_totals: Dict[str, int] = {}
    group_max_weight: Dict[str, float] = {}
    for trait, meta in groups.items():
        group_id = meta.get("group_id")
        if not group_id:
            continue
        group_max_weight[group_id] = max(
            group_max_weight.get(group_id, 0.0), float(weights.get(trait, UNCONFIGURED_TRAIT_WEIGHT))
        )
    for trait, count in counts.items():
        group_id = groups.get(_trait_key(trait), {}).get("group_id")
        if group_id:
            group_totals[group_id] = group_totals.get(group_id, 0) + count

    rows: List[Dict[str, Any]] = []
    for trait, count in counts.items():
        meta = groups.get(_trait_key(trait), {})
        group_id = meta.get("group_id")
        weight = float(weights.get(_trait_key(trait), UNCONFIGURED_TRAIT_WEIGHT))
        max_weight = group_max_weight.get(group_id, float(W_MAX)) if group_id else float(W_MAX)
        group_total = group_totals.get(group_id, 0) if group_id else 0

        rows.append({
            "trait": trait,
            "count": count,
            "percentage": round(count / total * 100, 1) if total else 0.0,
            "group_percentage": round(count / group_total * 100, 1) if group_total else None,
            "weight": weight,
            "weighted_score": round(weight / max_weight * 100, 1) if max_weight > 0 else 0.0,
            "group_id": group_id,
            "group_name": meta.get("group_name"),
        })

    rows.sort(key=lambda r: r["percentage"], reverse=True)

    top = rows[0]["percentage"] if rows else None
    dominant = [r["trait"] for r in rows if r["percentage"] == top] if rows else []

    dominant_by_group: Dict[str, str] = {}
    for row in rows:
        # rows déjà triées : le premier vu par groupe est le dominant
        if row["group_id"] and row["group_id"] not in dominant_by_group:
            dominant_by_group[row["group_id"]] = row["trait"]

    weighted_score = (
        round(sum(r["weighted_score"] for r in rows) / len(rows), 1) if rows else 0.0
    )

    return {
        "traits": rows,
        "dominant_traits": dominant,
        "dominant_by_group": dominant_by_group,
        "total_responses": total,
        "has_trait_weights": bool(weights),
        "weighted_score": weighted_score,
    }


def merge_process_traits(
    stage_configs: List[List[Any]],
    discovered_traits: List[str],
) -> List[Dict[str, Any]]:
    """
    Catalogue des traits d'un processus de sélection.

    stage_configs     : une liste de TraitWeight par étape configurée
    discovered_traits : traits trouvés sur les options opinatives des tests

    Trait présent dans plusieurs étapes → le poids le plus élevé gagne.
    Trait seulement découvert → poids UNCONFIGURED_TRAIT_WEIGHT.
    """
    merged: Dict[str, Dict[str, Any]] = {}

    for trait_weights in stage_configs:
        for tw in trait_weights or []:
            name = (getattr(tw, "trait_name", None) or "").strip()
            if not name or getattr(tw, "weight", None) is None:
                continue
            existing = merged.get(name)
            if existing is None or float(tw.weight) > existing["weight"]:
                merged[name] = {
                    "name": name,
                    "weight": float(tw.weight),
                    "group_id": getattr(tw, "group_id", None),
                    "group_name": getattr(tw, "group_name", None),
                    "configured": True,
                }

    for name in discovered_traits:
        if name and name not in merged:
            merged[name] = {
                "name": name,
                "weight": UNCONFIGURED_TRAIT_WEIGHT,
                "group_id": None,
                "group_name": None,
                "configured": False,
            }

    return list(merged.values())
