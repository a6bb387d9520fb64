"""
Augmenters: secondary-concern adjustments on top of a base routine.

Every augmenter is a pure `(products, catalog, context) -> products`
transform. They run as a fold in a fixed order:

    pigmentation → anti-aging → dark circles → enlarged pores → elasticity

Replacement augmenters own a routine step. They swap a generic product
(one that treats none of the visitor's concerns) for a targeted one, fill
the step when it is empty, and otherwise leave it alone unless the policy
allows stacking a second targeted product. Additive augmenters bring their
own step and only widen it.
"""

from dataclasses import dataclass, field
from functools import reduce
from typing import Callable, Optional, Sequence

from scanbeauty.recommender import rules
from scanbeauty.recommender.matching import pick_best, same_category, treats, treats_any
from scanbeauty.recommender.rules import PrimaryCondition
from scanbeauty.schemas import Category, Product

Products = tuple[Product, ...]


@dataclass(frozen=True)
class RecommendationPolicy:
    anti_aging_age: int = rules.ANTI_AGING_AGE
    # Allow two targeted products in one step (e.g. acne serum + brightening serum)
    stack_targeted_products: bool = False


DEFAULT_POLICY = RecommendationPolicy()


@dataclass(frozen=True)
class RoutineContext:
    skin_type: Optional[str]
    age: Optional[int]
    concerns: frozenset[str]
    condition: PrimaryCondition = PrimaryCondition.BASE
    policy: RecommendationPolicy = field(default=DEFAULT_POLICY)

    @property
    def target_concerns(self) -> frozenset[str]:
        """Concerns the routine is working on, including age-driven anti-age."""
        if rules.has_anti_aging(self.concerns, self.age, self.policy.anti_aging_age):
            return self.concerns | {rules.WRINKLES}
        return self.concerns


def _covers(products: Products, category: str, concern: str) -> bool:
    return any(same_category(p, category) and treats(p, concern) for p in products)


def _place(
    products: Products,
    catalog: Sequence[Product],
    ctx: RoutineContext,
    category: str,
    concern: str,
    *,
    additive: bool,
) -> tuple[Products, bool]:
    """Put a product treating `concern` into `category`.

    Returns the new products and whether the step now covers the concern.
    """
    if _covers(products, category, concern):
        return products, True

    candidate = pick_best(
        catalog,
        category,
        ctx.skin_type,
        (concern,),
        require_concern=True,
        exclude_ids=[p.id for p in products],
    )
    if candidate is None:
        return products, False

    slots = [i for i, p in enumerate(products) if same_category(p, category)]
    if not slots:
        return products + (candidate,), True

    generic = [i for i in slots if not treats_any(products[i], ctx.target_concerns)]
    if generic:
        i = generic[0]
        return products[:i] + (candidate,) + products[i + 1:], True

    if additive or ctx.policy.stack_targeted_products:
        last = slots[-1]
        return products[: last + 1] + (candidate,) + products[last + 1:], True

    return products, False


def add_pigmentation_treatment(
    products: Products, catalog: Sequence[Product], ctx: RoutineContext
) -> Products:
    """Brightening serum for spots and uneven tone."""
    result, _ = _place(
        products, catalog, ctx, Category.SIERO.value, rules.PIGMENTATION, additive=False
    )
    return result


def add_anti_aging_treatment(
    products: Products, catalog: Sequence[Product], ctx: RoutineContext
) -> Products:
    """Anti-age cream, or an anti-age serum when the cream step is taken."""
    result, placed = _place(
        products, catalog, ctx, Category.CREMA_VISO.value, rules.WRINKLES, additive=False
    )
    if placed:
        return result
    result, _ = _place(
        result, catalog, ctx, Category.SIERO.value, rules.WRINKLES, additive=False
    )
    return result


def add_eye_contour(
    products: Products, catalog: Sequence[Product], ctx: RoutineContext
) -> Products:
    result, _ = _place(
        products, catalog, ctx, Category.CONTORNO_OCCHI.value, rules.DARK_CIRCLES, additive=True
    )
    return result


def add_pore_refiner(
    products: Products, catalog: Sequence[Product], ctx: RoutineContext
) -> Products:
    """Pore-refining toner, or a purifying mask when the toner step is taken."""
    result, placed = _place(
        products, catalog, ctx, Category.TONICO.value, rules.ENLARGED_PORES, additive=False
    )
    if placed:
        return result
    result, _ = _place(
        result, catalog, ctx, Category.MASCHERA.value, rules.ENLARGED_PORES, additive=False
    )
    return result


def add_firming_care(
    products: Products, catalog: Sequence[Product], ctx: RoutineContext
) -> Products:
    """Firming body oil or butter for loss of elasticity."""
    result, _ = _place(
        products, catalog, ctx, Category.CORPO.value, rules.ELASTICITY, additive=True
    )
    return result


Augmenter = Callable[[Products, Sequence[Product], RoutineContext], Products]
Trigger = Callable[[RoutineContext], bool]

AUGMENTERS: tuple[tuple[Trigger, Augmenter], ...] = (
    (lambda ctx: rules.has_pigmentation(ctx.concerns), add_pigmentation_treatment),
    (
        lambda ctx: rules.has_anti_aging(ctx.concerns, ctx.age, ctx.policy.anti_aging_age),
        add_anti_aging_treatment,
    ),
    (lambda ctx: rules.has_dark_circles(ctx.concerns), add_eye_contour),
    (lambda ctx: rules.has_enlarged_pores(ctx.concerns), add_pore_refiner),
    (lambda ctx: rules.has_elasticity(ctx.concerns), add_firming_care),
)


def apply_augmenters(
    products: Sequence[Product], catalog: Sequence[Product], ctx: RoutineContext
) -> Products:
    active = [augment for trigger, augment in AUGMENTERS if trigger(ctx)]
    return reduce(lambda acc, augment: augment(acc, catalog, ctx), active, tuple(products))
