"""
Recommendation entry point.

`get_recommended_products` is pure and total: it never raises for a
well-formed profile and catalog, and an empty or partial catalog simply
yields a shorter list.
"""

import logging
from typing import Iterable, Optional, Sequence

from scanbeauty.recommender import rules
from scanbeauty.recommender.augmenters import (
    DEFAULT_POLICY,
    RecommendationPolicy,
    RoutineContext,
    apply_augmenters,
)
from scanbeauty.recommender.builders import build_routine
from scanbeauty.recommender.matching import active_only, normalize
from scanbeauty.schemas import FULL_ROUTINE, Category, Product, UserProfile

logger = logging.getLogger(__name__)

ROUTINE_ORDER: tuple[str, ...] = (
    Category.DETERGENTE.value,
    Category.TONICO.value,
    Category.SIERO.value,
    Category.CONTORNO_OCCHI.value,
    Category.CREMA_VISO.value,
    Category.PROTEZIONE_SOLARE.value,
    Category.MASCHERA.value,
    Category.CORPO.value,
)

# Quiz product type → catalog categories
PRODUCT_TYPE_CATEGORIES: dict[str, tuple[str, ...]] = {
    "detergente": (Category.DETERGENTE.value,),
    "tonico": (Category.TONICO.value,),
    "siero": (Category.SIERO.value,),
    "crema": (Category.CREMA_VISO.value,),
    "contorno_occhi": (Category.CONTORNO_OCCHI.value,),
    "protezione_solare": (Category.PROTEZIONE_SOLARE.value,),
    "maschera": (Category.MASCHERA.value,),
    "olio_corpo": (Category.CORPO.value,),
    "prodotti_corpo": (Category.CORPO.value,),
    "crema_mani_piedi": ("Crema Mani e Piedi",),
}

_ORDER_INDEX = {normalize(category): i for i, category in enumerate(ROUTINE_ORDER)}


def routine_position(product: Product) -> int:
    """Index in ROUTINE_ORDER; unknown categories go after every known one."""
    return _ORDER_INDEX.get(normalize(product.category), len(ROUTINE_ORDER))


def sort_by_routine_order(products: Iterable[Product]) -> list[Product]:
    # sorted() is stable, so equal positions keep their input order
    return sorted(products, key=routine_position)


def dedupe(products: Iterable[Product]) -> list[Product]:
    seen: set[str] = set()
    unique: list[Product] = []
    for product in products:
        if product.id in seen:
            continue
        seen.add(product.id)
        unique.append(product)
    return unique


def wants_single_category(profile: UserProfile) -> bool:
    return bool(profile.product_type) and profile.product_type != FULL_ROUTINE


def filter_by_product_type(catalog: Sequence[Product], product_type: str) -> list[Product]:
    categories = PRODUCT_TYPE_CATEGORIES.get(product_type.lower(), (product_type,))
    wanted = {normalize(c) for c in categories}
    return [p for p in active_only(catalog) if normalize(p.category) in wanted]


def get_recommended_products(
    profile: UserProfile,
    catalog: Sequence[Product],
    policy: Optional[RecommendationPolicy] = None,
) -> list[Product]:
    policy = policy or DEFAULT_POLICY
    available = active_only(catalog)

    if wants_single_category(profile):
        return filter_by_product_type(available, profile.product_type)

    concerns = rules.effective_concerns(profile.concerns)
    condition = rules.resolve_primary_condition(concerns)
    skin_type = profile.skin_type.value if profile.skin_type else None

    ctx = RoutineContext(
        skin_type=skin_type,
        age=profile.age,
        concerns=concerns,
        condition=condition,
        policy=policy,
    )

    base = build_routine(condition, available, skin_type, profile.age, policy.anti_aging_age)
    augmented = apply_augmenters(base, available, ctx)
    result = sort_by_routine_order(dedupe(augmented))

    logger.debug(
        f"Recommended {len(result)} products | condition={condition.value} "
        f"skin={skin_type} concerns={sorted(concerns)}"
    )
    return result
