"""
Unit tests for the recommendation engine: catalog matching, routine
builders, augmenters and the public get_recommended_products entry point.

All tests run against a small in-memory catalog; no database involved.
"""

import pytest

from scanbeauty.recommender import (
    ROUTINE_ORDER,
    RecommendationPolicy,
    get_recommended_products,
)
from scanbeauty.recommender.augmenters import (
    RoutineContext,
    add_anti_aging_treatment,
    add_eye_contour,
    add_firming_care,
    add_pigmentation_treatment,
    add_pore_refiner,
)
from scanbeauty.recommender.builders import (
    build_acne_routine,
    build_base_routine,
    build_rosacea_routine,
    build_routine,
    build_sensitive_routine,
)
from scanbeauty.recommender.engine import (
    dedupe,
    filter_by_product_type,
    routine_position,
    sort_by_routine_order,
)
from scanbeauty.recommender.matching import (
    FIT_EXACT,
    FIT_NEIGHBOUR,
    FIT_UNIVERSAL,
    pick_best,
    skin_fit,
    treats,
)
from scanbeauty.recommender.rules import PrimaryCondition
from scanbeauty.schemas import Product, SkinType, UserProfile


# ── Fixtures ────────────────────────────────────────────────────────────────


def _product(pid: str, category: str, concerns=(), skin_types=(), **overrides) -> Product:
    defaults = dict(
        id=pid,
        name=pid,
        category=category,
        price=20.0,
        concerns_treated=list(concerns),
        skin_types=list(skin_types),
    )
    defaults.update(overrides)
    return Product(**defaults)


def _catalog() -> list[Product]:
    return [
        _product("p1", "Detergente", ["Acne"], ["Grassa"]),
        _product("p2", "Detergente", ["Rossori", "Pelle sensibile o irritata"], ["Tutti i tipi"]),
        _product("t1", "Tonico", ["Pori dilatati", "Acne"], ["Grassa", "Mista"]),
        _product("t2", "Tonico", ["Rossori"], ["Tutti i tipi"]),
        _product("s1", "Siero", ["Acne", "Imperfezioni"], ["Grassa"]),
        _product("s2", "Siero", ["Macchie e discromie"], ["Tutti i tipi"]),
        _product("s3", "Siero", ["Rughe"], ["Tutti i tipi"]),
        _product("e1", "Contorno Occhi", ["Occhiaie"], ["Tutti i tipi"]),
        _product("c1", "Crema Viso", ["Eccesso di sebo"], ["Grassa"]),
        _product("c2", "Crema Viso", ["Rughe", "Perdita di tono"], ["Secca", "Normale"]),
        _product("sp1", "Protezione Solare", ["Danni solari"], ["Tutti i tipi"]),
        _product("m1", "Maschera", ["Pori dilatati"], ["Grassa", "Mista"]),
        _product("b1", "Olio/Burro/Corpo", ["Elasticità", "Rassodante"], ["Tutti i tipi"]),
        _product("hm", "Crema Mani e Piedi", [], ["Tutti i tipi"]),
        _product("x1", "Siero", ["Acne"], ["Grassa"], active=False),
        _product("tx", "Tonico", ["Pori dilatati"], ["Tutti i tipi"], active=False),
    ]


def _ids(products) -> list[str]:
    return [p.id for p in products]


def _profile(**overrides) -> UserProfile:
    return UserProfile(**overrides)


# ── Matching ────────────────────────────────────────────────────────────────


class TestMatching:
    def test_treats_maps_quiz_label_to_catalog_label(self):
        serum = _product("s", "Siero", ["Macchie e discromie"])
        assert treats(serum, "pigmentazione")
        assert not treats(serum, "acne")

    def test_treats_ignores_accents_and_case(self):
        oil = _product("o", "Olio/Burro/Corpo", ["ELASTICITÀ"])
        assert treats(oil, "elasticita")

    def test_skin_fit_ranks(self):
        exact = _product("a", "Siero", skin_types=["Pelle grassa"])
        universal = _product("b", "Siero", skin_types=["Tutti i tipi"])
        neighbour = _product("c", "Siero", skin_types=["Normale"])
        unsuitable = _product("d", "Siero", skin_types=["Grassa"])

        assert skin_fit(exact, "grassa") == FIT_EXACT
        assert skin_fit(universal, "grassa") == FIT_UNIVERSAL
        assert skin_fit(neighbour, "secca") == FIT_NEIGHBOUR
        assert skin_fit(unsuitable, "secca") is None

    def test_no_skin_labels_suits_everyone(self):
        assert skin_fit(_product("a", "Siero"), "secca") == FIT_UNIVERSAL

    def test_unknown_skin_type_suits_everything(self):
        assert skin_fit(_product("a", "Siero", skin_types=["Grassa"]), None) == FIT_UNIVERSAL

    def test_pick_best_prefers_skin_fit_over_concern(self):
        best = pick_best(_catalog(), "Tonico", "mista", ("rossori",))
        assert best.id == "t1"

    def test_pick_best_uses_concern_to_break_ties(self):
        best = pick_best(_catalog(), "Tonico", None, ("rossori",))
        assert best.id == "t2"

    def test_pick_best_skips_inactive_and_excluded(self):
        best = pick_best(_catalog(), "Siero", "grassa", ("acne",), exclude_ids=["s1"])
        assert best.id != "x1"
        assert best.id != "s1"

    def test_pick_best_required_concern(self):
        assert pick_best(_catalog(), "Maschera", "grassa", ("acne",), require_concern=True) is None


# ── Routine builders ────────────────────────────────────────────────────────


class TestBuilders:
    def test_acne_routine_for_oily_skin(self):
        assert _ids(build_acne_routine(_catalog(), "grassa")) == ["p1", "t1", "s1", "c1"]

    def test_acne_routine_adds_mask_only_when_it_treats_acne(self):
        catalog = _catalog() + [_product("m2", "Maschera", ["Imperfezioni"], ["Grassa"])]
        assert _ids(build_acne_routine(catalog, "grassa"))[-1] == "m2"

    def test_rosacea_routine_prefers_soothing_products(self):
        assert _ids(build_rosacea_routine(_catalog(), None)) == ["p2", "t2", "s1", "c1"]

    def test_sensitive_routine_prefers_soothing_products(self):
        assert _ids(build_sensitive_routine(_catalog(), None)) == ["p2", "t2", "s1", "c1"]

    def test_sensitive_routine_respects_skin_type(self):
        assert _ids(build_sensitive_routine(_catalog(), "secca")) == ["p2", "t2", "s2", "c2"]

    def test_base_routine_turns_anti_age_from_threshold(self):
        young = build_base_routine(_catalog(), "normale", age=30)
        mature = build_base_routine(_catalog(), "normale", age=50)
        assert _ids(young) == ["p2", "t2", "s2", "c2"]
        assert _ids(mature) == ["p2", "t2", "s3", "c2"]

    def test_missing_step_is_skipped(self):
        catalog = [p for p in _catalog() if p.category != "Tonico"]
        assert _ids(build_acne_routine(catalog, "grassa")) == ["p1", "s1", "c1"]

    def test_build_routine_dispatch(self):
        catalog = _catalog()
        assert build_routine(PrimaryCondition.ROSACEA, catalog, None) == build_rosacea_routine(catalog, None)
        assert build_routine(PrimaryCondition.ACNE, catalog, "grassa") == build_acne_routine(catalog, "grassa")
        assert build_routine(PrimaryCondition.BASE, catalog, "normale", 50) == build_base_routine(
            catalog, "normale", 50
        )


# ── Augmenters ──────────────────────────────────────────────────────────────


def _ctx(skin_type=None, age=None, concerns=(), stack=False) -> RoutineContext:
    return RoutineContext(
        skin_type=skin_type,
        age=age,
        concerns=frozenset(concerns),
        policy=RecommendationPolicy(stack_targeted_products=stack),
    )


def _pore_catalog() -> list[Product]:
    """Acne toner that also wins the toner step, plus a pore-only toner."""
    catalog = [p for p in _catalog() if p.id != "t1"]
    return catalog + [
        _product("ta", "Tonico", ["Acne"], ["Grassa"]),
        _product("tp", "Tonico", ["Pori dilatati"], ["Grassa"]),
    ]


class TestAugmenters:
    def test_pigmentation_replaces_generic_serum(self):
        catalog = _catalog()
        base = tuple(build_base_routine(catalog, "grassa", age=30))
        result = add_pigmentation_treatment(base, catalog, _ctx("grassa", 30, ["pigmentazione"]))
        assert "s2" in _ids(result)
        assert "s1" not in _ids(result)

    def test_pigmentation_keeps_targeted_serum(self):
        catalog = _catalog()
        base = tuple(build_acne_routine(catalog, "grassa"))
        ctx = _ctx("grassa", 30, ["acne", "pigmentazione"])
        assert add_pigmentation_treatment(base, catalog, ctx) == base

    def test_pigmentation_stacks_when_policy_allows(self):
        catalog = _catalog()
        base = tuple(build_acne_routine(catalog, "grassa"))
        ctx = _ctx("grassa", 30, ["acne", "pigmentazione"], stack=True)
        assert _ids(add_pigmentation_treatment(base, catalog, ctx)) == ["p1", "t1", "s1", "s2", "c1"]

    def test_anti_aging_falls_back_to_serum(self):
        catalog = _catalog()
        base = tuple(build_base_routine(catalog, "grassa", age=50))
        result = add_anti_aging_treatment(base, catalog, _ctx("grassa", 50))
        assert _ids(result) == ["p1", "t1", "s3", "c1"]

    def test_anti_aging_noop_when_cream_already_covers(self):
        catalog = _catalog()
        base = tuple(build_base_routine(catalog, "normale", age=50))
        assert add_anti_aging_treatment(base, catalog, _ctx("normale", 50)) == base

    def test_eye_contour_is_additive(self):
        catalog = _catalog()
        base = tuple(build_base_routine(catalog, "grassa", age=30))
        result = add_eye_contour(base, catalog, _ctx("grassa", 30, ["occhiaie"]))
        assert _ids(result) == _ids(base) + ["e1"]

    def test_augmenter_without_candidate_is_noop(self):
        catalog = [p for p in _catalog() if p.category != "Contorno Occhi"]
        base = tuple(build_base_routine(catalog, "grassa", age=30))
        assert add_eye_contour(base, catalog, _ctx("grassa", 30, ["occhiaie"])) == base

    def test_pore_refiner_falls_back_to_mask_when_toner_is_targeted(self):
        catalog = _pore_catalog()
        base = tuple(build_acne_routine(catalog, "grassa"))
        assert _ids(base) == ["p1", "ta", "s1", "c1"]

        result = add_pore_refiner(base, catalog, _ctx("grassa", 30, ["acne", "pori_dilatati"]))
        assert _ids(result) == ["p1", "ta", "s1", "c1", "m1"]

    def test_pore_refiner_stacks_toner_when_policy_allows(self):
        catalog = _pore_catalog()
        base = tuple(build_acne_routine(catalog, "grassa"))
        ctx = _ctx("grassa", 30, ["acne", "pori_dilatati"], stack=True)
        assert _ids(add_pore_refiner(base, catalog, ctx)) == ["p1", "ta", "tp", "s1", "c1"]

    def test_firming_care_only_appends_body_step(self):
        catalog = _catalog()
        base = tuple(build_base_routine(catalog, "grassa", age=30))
        result = add_firming_care(base, catalog, _ctx("grassa", 30, ["elasticita"]))
        assert result[:-1] == base
        assert _ids(result) == ["p1", "t1", "s1", "c1", "b1"]


# ── get_recommended_products ────────────────────────────────────────────────


class TestGetRecommendedProducts:
    def test_oily_acne_thirty(self):
        profile = _profile(skin_type=SkinType.GRASSA, age=30, concerns=["acne"])
        result = get_recommended_products(profile, _catalog())
        assert _ids(result) == ["p1", "t1", "s1", "c1"]
        assert [p.category for p in result] == ["Detergente", "Tonico", "Siero", "Crema Viso"]

    def test_acne_plus_redness_uses_rosacea_routine(self):
        catalog = _catalog()
        result = get_recommended_products(_profile(concerns=["acne", "rossori"]), catalog)
        acne_only = get_recommended_products(_profile(concerns=["acne"]), catalog)
        assert _ids(result) == ["p2", "t2", "s1", "c1"]
        assert _ids(acne_only) == ["p1", "t1", "s1", "c1"]

    def test_product_type_returns_only_that_category(self):
        profile = _profile(skin_type=SkinType.SECCA, concerns=["acne"], product_type="tonico")
        result = get_recommended_products(profile, _catalog())
        assert _ids(result) == ["t1", "t2"]

    def test_product_type_mapped_to_other_category_name(self):
        result = get_recommended_products(_profile(product_type="crema_mani_piedi"), _catalog())
        assert _ids(result) == ["hm"]

    def test_full_routine_product_type_runs_rules(self):
        profile = _profile(skin_type=SkinType.GRASSA, age=30, concerns=["acne"], product_type="routine_completa")
        assert _ids(get_recommended_products(profile, _catalog())) == ["p1", "t1", "s1", "c1"]

    def test_age_fifty_gets_anti_age_products(self):
        result = get_recommended_products(_profile(skin_type=SkinType.NORMALE, age=50), _catalog())
        assert _ids(result) == ["p2", "t2", "s3", "c2"]

    def test_age_fifty_oily_swaps_serum_for_anti_age(self):
        result = get_recommended_products(_profile(skin_type=SkinType.GRASSA, age=50), _catalog())
        assert "s3" in _ids(result)

    def test_anti_aging_age_comes_from_policy(self):
        profile = _profile(skin_type=SkinType.NORMALE, age=32)
        default = get_recommended_products(profile, _catalog())
        earlier = get_recommended_products(profile, _catalog(), RecommendationPolicy(anti_aging_age=30))
        assert "s3" not in _ids(default)
        assert "s3" in _ids(earlier)

    def test_dark_circles_slot_in_before_cream(self):
        profile = _profile(skin_type=SkinType.GRASSA, age=30, concerns=["occhiaie"])
        assert _ids(get_recommended_products(profile, _catalog())) == ["p1", "t1", "s1", "e1", "c1"]

    def test_elasticity_adds_body_care_last(self):
        profile = _profile(skin_type=SkinType.GRASSA, age=30, concerns=["elasticita"])
        assert _ids(get_recommended_products(profile, _catalog())) == ["p1", "t1", "s1", "c1", "b1"]

    def test_redness_only_gets_sensitive_routine(self):
        profile = _profile(age=30, concerns=["rossori"])
        assert _ids(get_recommended_products(profile, _catalog())) == ["p2", "t2", "s1", "c1"]

    def test_acne_with_pores_adds_mask_behind_targeted_toner(self):
        profile = _profile(skin_type=SkinType.GRASSA, age=30, concerns=["acne", "pori_dilatati"])
        assert _ids(get_recommended_products(profile, _pore_catalog())) == ["p1", "ta", "s1", "c1", "m1"]

    def test_enlarged_pores_swap_generic_toner(self):
        profile = _profile(skin_type=SkinType.NORMALE, age=30, concerns=["pori_dilatati"])
        assert _ids(get_recommended_products(profile, _catalog())) == ["p2", "t1", "s2", "c2"]

    def test_nessuna_ignores_other_concerns(self):
        with_none = _profile(skin_type=SkinType.GRASSA, age=30, concerns=["nessuna", "acne"])
        plain = _profile(skin_type=SkinType.GRASSA, age=30)
        assert _ids(get_recommended_products(with_none, _catalog())) == _ids(
            get_recommended_products(plain, _catalog())
        )

    def test_empty_catalog(self):
        assert get_recommended_products(_profile(concerns=["acne"]), []) == []

    def test_inactive_products_never_recommended(self):
        catalog = _catalog()
        for profile in _sample_profiles():
            assert not {"x1", "tx"} & set(_ids(get_recommended_products(profile, catalog)))

    def test_missing_step_is_skipped(self):
        catalog = [p for p in _catalog() if p.category != "Tonico"]
        profile = _profile(skin_type=SkinType.GRASSA, age=30, concerns=["acne"])
        assert _ids(get_recommended_products(profile, catalog)) == ["p1", "s1", "c1"]


def _sample_profiles() -> list[UserProfile]:
    return [
        _profile(),
        _profile(skin_type=SkinType.GRASSA, age=30, concerns=["acne"]),
        _profile(skin_type=SkinType.MISTA, age=45, concerns=["acne", "rossori", "pigmentazione"]),
        _profile(skin_type=SkinType.SECCA, age=60, concerns=["rughe", "occhiaie", "elasticita"]),
        _profile(skin_type=SkinType.NORMALE, age=22, concerns=["pori_dilatati", "pigmentazione"]),
        _profile(skin_type=SkinType.ASFITTICA, concerns=["rossori", "occhiaie"]),
        _profile(concerns=["nessuna"], product_type="siero"),
    ]


class TestEngineProperties:
    @pytest.mark.parametrize("profile", _sample_profiles())
    def test_no_duplicates(self, profile):
        ids = _ids(get_recommended_products(profile, _catalog()))
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize("profile", _sample_profiles())
    def test_routine_order_is_non_decreasing(self, profile):
        positions = [routine_position(p) for p in get_recommended_products(profile, _catalog())]
        assert positions == sorted(positions)

    @pytest.mark.parametrize("profile", _sample_profiles())
    def test_idempotent(self, profile):
        catalog = _catalog()
        assert get_recommended_products(profile, catalog) == get_recommended_products(profile, catalog)

    def test_catalog_not_mutated(self):
        catalog = _catalog()
        snapshot = [p.model_copy() for p in catalog]
        get_recommended_products(_profile(skin_type=SkinType.GRASSA, age=50, concerns=["pigmentazione"]), catalog)
        assert catalog == snapshot


class TestOrdering:
    def test_unknown_categories_sort_last_and_stay_stable(self):
        products = [
            _product("h", "Crema Mani e Piedi"),
            _product("a", "Siero"),
            _product("r", "Ricarica"),
            _product("d", "Detergente"),
        ]
        assert _ids(sort_by_routine_order(products)) == ["d", "a", "h", "r"]

    def test_routine_order_covers_every_category(self):
        products = [_product(str(i), category) for i, category in enumerate(reversed(ROUTINE_ORDER))]
        assert [p.category for p in sort_by_routine_order(products)] == list(ROUTINE_ORDER)

    def test_dedupe_keeps_first(self):
        first = _product("a", "Siero", name="first")
        second = _product("a", "Siero", name="second")
        assert [p.name for p in dedupe([first, second])] == ["first"]

    def test_filter_unknown_type_compares_category(self):
        assert _ids(filter_by_product_type(_catalog(), "Protezione Solare")) == ["sp1"]
