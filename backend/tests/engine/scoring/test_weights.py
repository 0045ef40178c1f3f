# tests/engine/scoring/test_weights.py
"""
Tests unitaires pour engine.scoring.weights

Couverture :
    normalize_rank_weight() :
        - Bornes [W_MIN, W_MAX] pour toute taille de groupe
        - Rang 1 = W_MAX, dernier rang = W_MIN, groupe de 1 = W_MAX
        - Groupe de 3 → [5, 3, 1]

    legacy_position_weight() :
        - Groupe de 5 → [5, 4, 3, 2, 1]
        - Groupe de 3 → [3, 2, 1]

    Chaîne de stratégies :
        - Poids configuré > suffixe d'id > position > défaut
        - Suffixe hors [1..5] ignoré, chiffres non ASCII compris

    resolve_option_weights() :
        - Politique LEGACY par défaut, LINEAR sur demande
        - Options sans id écartées
        - Entrée vide → {}

    rank_trait_weights() / build_trait_weight_map()
"""
import pytest

from app.engine.scoring.traits import TraitSource, UNKNOWN_TRAIT
from app.engine.scoring.weights import (
    W_MIN,
    W_MAX,
    DEFAULT_WEIGHT,
    OptionView,
    QuestionView,
    build_question_views,
    build_strategy_chain,
    build_trait_weight_map,
    configured_trait_weight,
    id_suffix_weight,
    legacy_position_weight,
    normalize_rank_weight,
    rank_trait_weights,
    resolve_option_weights,
    weigh_option,
)
from app.shared.enums import PositionWeightPolicy, TraitSourceKind
from app.shared.models import Option
from tests.conftest import make_opinion_question, make_option, make_question, make_trait_weight

pytestmark = pytest.mark.engine


def _weights_in_order(question, weights: dict) -> list:
    return [weights[o.id] for o in question.options]


# ── normalize_rank_weight ─────────────────────────────────────────────────────

class TestNormalizeRankWeight:
    @pytest.mark.parametrize("group_size", range(1, 12))
    def test_toujours_dans_les_bornes(self, group_size):
        for position in range(1, group_size + 1):
            assert W_MIN <= normalize_rank_weight(position, group_size) <= W_MAX

    @pytest.mark.parametrize("group_size", range(1, 12))
    def test_premier_rang_vaut_w_max(self, group_size):
        assert normalize_rank_weight(1, group_size) == W_MAX

    @pytest.mark.parametrize("group_size", range(2, 12))
    def test_dernier_rang_vaut_w_min(self, group_size):
        assert normalize_rank_weight(group_size, group_size) == W_MIN

    def test_groupe_unique(self):
        assert normalize_rank_weight(1, 1) == W_MAX

    def test_groupe_de_trois(self):
        assert [normalize_rank_weight(p, 3) for p in (1, 2, 3)] == [5.0, 3.0, 1.0]

    def test_groupe_de_cinq(self):
        assert [normalize_rank_weight(p, 5) for p in range(1, 6)] == [5.0, 4.0, 3.0, 2.0, 1.0]

    def test_decroissant(self):
        values = [normalize_rank_weight(p, 7) for p in range(1, 8)]
        assert values == sorted(values, reverse=True)

    def test_position_hors_bornes_clampee(self):
        assert normalize_rank_weight(10, 3) == W_MIN
        assert normalize_rank_weight(0, 3) == W_MAX


# ── legacy_position_weight ────────────────────────────────────────────────────

class TestLegacyPositionWeight:
    def test_groupe_de_cinq(self):
        assert [legacy_position_weight(p, 5) for p in range(1, 6)] == [5.0, 4.0, 3.0, 2.0, 1.0]

    def test_groupe_de_trois(self):
        assert [legacy_position_weight(p, 3) for p in (1, 2, 3)] == [3.0, 2.0, 1.0]

    def test_grand_groupe_plafonne(self):
        assert legacy_position_weight(1, 8) == W_MAX
        assert legacy_position_weight(8, 8) == W_MIN

    @pytest.mark.parametrize("group_size", range(1, 12))
    def test_toujours_dans_les_bornes(self, group_size):
        for position in range(1, group_size + 1):
            assert W_MIN <= legacy_position_weight(position, group_size) <= W_MAX


# ── Stratégies ────────────────────────────────────────────────────────────────

def _view(option_id="opt-x", label=None, position=1, group_size=3) -> OptionView:
    trait = TraitSource(TraitSourceKind.EXPLICIT, label) if label else UNKNOWN_TRAIT
    return OptionView(id=option_id, text="", trait=trait, position=position, group_size=group_size)


class TestStrategies:
    def test_poids_configure_prioritaire(self):
        chain = build_strategy_chain()
        option = _view(option_id="opt-5", label="Calmo", position=1)
        assert weigh_option(option, {"Calmo": 2.0}, chain) == 2.0

    def test_trait_absent_de_la_config_passe_la_main(self):
        assert configured_trait_weight(_view(label="Calmo"), {"Ansioso": 4.0}) is None

    def test_trait_inconnu_passe_la_main(self):
        assert configured_trait_weight(_view(), {"Calmo": 4.0}) is None

    def test_suffixe_d_id_avant_position(self):
        chain = build_strategy_chain()
        option = _view(option_id="opt-2", position=1, group_size=5)
        assert weigh_option(option, {}, chain) == 2.0

    @pytest.mark.parametrize("option_id", ["opt-0", "opt-7", "opt-9", "opt-b", ""])
    def test_suffixe_hors_echelle_ignore(self, option_id):
        assert id_suffix_weight(_view(option_id=option_id), {}) is None

    @pytest.mark.parametrize("option_id", ["opt-²", "opt-٣", "opt-５"])
    def test_suffixe_chiffre_non_ascii_ignore(self, option_id):
        assert id_suffix_weight(_view(option_id=option_id), {}) is None

    def test_position_selon_politique(self):
        option = _view(position=2, group_size=3)
        legacy = build_strategy_chain(PositionWeightPolicy.LEGACY)
        linear = build_strategy_chain(PositionWeightPolicy.LINEAR)
        assert weigh_option(option, {}, legacy) == 2.0
        assert weigh_option(option, {}, linear) == 3.0

    def test_defaut_sans_position(self):
        chain = build_strategy_chain()
        option = _view(position=None, group_size=None)
        assert weigh_option(option, {}, chain) == float(DEFAULT_WEIGHT)


# ── resolve_option_weights ────────────────────────────────────────────────────

class TestResolveOptionWeights:
    def test_cinq_options_legacy(self):
        question = make_opinion_question("q-a", ["A", "B", "C", "D", "E"])
        weights = resolve_option_weights([question])
        assert _weights_in_order(question, weights) == [5.0, 4.0, 3.0, 2.0, 1.0]

    def test_trois_options_legacy(self):
        question = make_opinion_question("q-a", ["A", "B", "C"])
        weights = resolve_option_weights([question], policy=PositionWeightPolicy.LEGACY)
        assert _weights_in_order(question, weights) == [3.0, 2.0, 1.0]

    def test_trois_options_linear(self):
        question = make_opinion_question("q-a", ["A", "B", "C"])
        weights = resolve_option_weights([question], policy=PositionWeightPolicy.LINEAR)
        assert _weights_in_order(question, weights) == [5.0, 3.0, 1.0]

    def test_config_de_traits_surcharge_la_position(self):
        question = make_opinion_question("q-a", ["Extrovertido", "Introvertido"])
        trait_map = build_trait_weight_map([
            make_trait_weight(trait_name="Extrovertido", weight=1.0),
            make_trait_weight(trait_name="Introvertido", weight=5.0),
        ])
        weights = resolve_option_weights([question], trait_weights=trait_map)
        assert _weights_in_order(question, weights) == [1.0, 5.0]

    def test_config_partielle(self):
        question = make_opinion_question("q-a", ["Extrovertido", "Introvertido", "Neutro"])
        weights = resolve_option_weights([question], trait_weights={"Introvertido": 4.0})
        assert _weights_in_order(question, weights) == [3.0, 4.0, 1.0]

    def test_plusieurs_questions_cles_distinctes(self):
        q1 = make_opinion_question("q-a", ["A", "B"])
        q2 = make_opinion_question("q-b", ["A", "B", "C"])
        weights = resolve_option_weights([q1, q2])
        assert len(weights) == 5
        assert _weights_in_order(q2, weights) == [3.0, 2.0, 1.0]

    def test_options_sans_id_ecartees(self):
        question = make_question(options=[
            make_option(id="opt-a", text="A (X)"),
            make_option(id=None, text="B (Y)"),
            make_option(id="opt-c", text="C (Z)"),
        ])
        weights = resolve_option_weights([question])
        assert weights == {"opt-a": 2.0, "opt-c": 1.0}

    def test_id_a_suffixe_non_ascii_retombe_sur_la_position(self):
        question = make_question(options=[
            make_option(id="opt-²", text="Opção (A)", position=0),
            make_option(id="opt-b", text="Opção (B)", position=1),
        ])
        weights = resolve_option_weights([question])
        assert weights == {"opt-²": 2.0, "opt-b": 1.0}

    def test_poids_stocke_sur_l_option_ignore(self):
        question = make_opinion_question("q-a", ["A", "B"])
        question.options[0].weight = 1.0
        assert _weights_in_order(question, resolve_option_weights([question])) == [2.0, 1.0]
        assert "weight" not in Option.__table__.columns

    def test_question_sans_option(self):
        assert resolve_option_weights([make_question(options=[])]) == {}

    def test_entree_vide(self):
        assert resolve_option_weights([]) == {}
        assert resolve_option_weights(None) == {}

    def test_accepte_des_question_views(self):
        views = build_question_views([make_opinion_question("q-a", ["A", "B"])])
        assert resolve_option_weights(views) == {"opt-q-a-a": 2.0, "opt-q-a-b": 1.0}

    def test_recalcul_identique(self):
        question = make_opinion_question("q-a", ["A", "B", "C"])
        assert resolve_option_weights([question]) == resolve_option_weights([question])


class TestBuildQuestionViews:
    def test_trait_resolu_une_fois(self):
        question = make_question(options=[
            make_option(id="opt-a", text="Resposta (Calmo)"),
            make_option(id="opt-b", text="Outra", trait_label="Ansioso"),
            make_option(id="opt-c", text="Sem traço"),
        ])
        view = build_question_views([question])[0]
        assert [o.trait.kind for o in view.options] == [
            TraitSourceKind.PARSED_FROM_TEXT,
            TraitSourceKind.EXPLICIT,
            TraitSourceKind.UNKNOWN,
        ]
        assert [o.trait_label for o in view.options] == ["Calmo", "Ansioso", None]

    def test_positions_1_based(self):
        view = build_question_views([make_opinion_question("q-a", ["A", "B"])])[0]
        assert [(o.position, o.group_size) for o in view.options] == [(1, 2), (2, 2)]


# ── Configuration admin ───────────────────────────────────────────────────────

class TestRankTraitWeights:
    def test_trois_traits(self):
        rows = rank_trait_weights(["Extrovertido", "Neutro", "Introvertido"])
        assert rows == [
            {"trait_name": "Extrovertido", "weight": 5.0, "order": 1},
            {"trait_name": "Neutro", "weight": 3.0, "order": 2},
            {"trait_name": "Introvertido", "weight": 1.0, "order": 3},
        ]

    def test_trait_unique_vaut_w_max(self):
        assert rank_trait_weights(["Calmo"]) == [{"trait_name": "Calmo", "weight": 5.0, "order": 1}]

    def test_doublons_et_vides_ignores(self):
        rows = rank_trait_weights(["A", " ", "B", "A", None])
        assert [r["trait_name"] for r in rows] == ["A", "B"]
        assert [r["weight"] for r in rows] == [5.0, 1.0]

    def test_arrondi_deux_decimales(self):
        rows = rank_trait_weights(["A", "B", "C", "D"])
        assert [r["weight"] for r in rows] == [5.0, 3.67, 2.33, 1.0]

    def test_vide(self):
        assert rank_trait_weights([]) == []


class TestBuildTraitWeightMap:
    def test_mapping(self):
        mapping = build_trait_weight_map([
            make_trait_weight(trait_name="Calmo", weight=4),
            make_trait_weight(trait_name=" Ansioso ", weight=2.5),
        ])
        assert mapping == {"Calmo": 4.0, "Ansioso": 2.5}

    def test_lignes_invalides_ignorees(self):
        mapping = build_trait_weight_map([
            make_trait_weight(trait_name="", weight=4),
            make_trait_weight(trait_name="Calmo", weight=None),
        ])
        assert mapping == {}

    def test_sans_config(self):
        assert build_trait_weight_map(None) == {}
