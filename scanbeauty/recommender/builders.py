"""
Routine builders: one base routine per primary condition.

Each builder walks its routine steps and picks the best active product for
the visitor's skin type, preferring products that treat the condition. A
step with no suitable product is left out; partial routines are valid.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from scanbeauty.recommender import rules
from scanbeauty.recommender.matching import pick_best
from scanbeauty.recommender.rules import PrimaryCondition
from scanbeauty.schemas import Category, Product


@dataclass(frozen=True)
class StepSpec:
    category: str
    prefer: tuple[str, ...] = ()
    require_concern: bool = False


ROSACEA_STEPS = (
    StepSpec(Category.DETERGENTE.value, (rules.REDNESS,)),
    StepSpec(Category.TONICO.value, (rules.REDNESS,)),
    StepSpec(Category.SIERO.value, (rules.REDNESS, rules.ACNE)),
    StepSpec(Category.CREMA_VISO.value, (rules.REDNESS,)),
)

ACNE_STEPS = (
    StepSpec(Category.DETERGENTE.value, (rules.ACNE, "oleosita")),
    StepSpec(Category.TONICO.value, (rules.ACNE, "oleosita")),
    StepSpec(Category.SIERO.value, (rules.ACNE,)),
    StepSpec(Category.CREMA_VISO.value, (rules.ACNE, "oleosita")),
    StepSpec(Category.MASCHERA.value, (rules.ACNE,), require_concern=True),
)

SENSITIVE_STEPS = (
    StepSpec(Category.DETERGENTE.value, (rules.REDNESS,)),
    StepSpec(Category.TONICO.value, (rules.REDNESS,)),
    StepSpec(Category.SIERO.value, (rules.REDNESS,)),
    StepSpec(Category.CREMA_VISO.value, (rules.REDNESS,)),
)

# What a plain routine leans on for each skin type
BASE_FOCUS: dict[str, tuple[str, ...]] = {
    "secca": ("disidratazione",),
    "grassa": ("oleosita",),
    "mista": ("oleosita", "disidratazione"),
    "normale": ("disidratazione",),
    "asfittica": ("pori_dilatati", "texture"),
}


def _build(
    catalog: Sequence[Product], skin_type: Optional[str], steps: Sequence[StepSpec]
) -> list[Product]:
    routine: list[Product] = []
    for step in steps:
        product = pick_best(
            catalog,
            step.category,
            skin_type,
            step.prefer,
            require_concern=step.require_concern,
            exclude_ids=[p.id for p in routine],
        )
        if product is not None:
            routine.append(product)
    return routine


def build_rosacea_routine(catalog: Sequence[Product], skin_type: Optional[str]) -> list[Product]:
    return _build(catalog, skin_type, ROSACEA_STEPS)


def build_acne_routine(catalog: Sequence[Product], skin_type: Optional[str]) -> list[Product]:
    return _build(catalog, skin_type, ACNE_STEPS)


def build_sensitive_routine(catalog: Sequence[Product], skin_type: Optional[str]) -> list[Product]:
    return _build(catalog, skin_type, SENSITIVE_STEPS)


def build_base_routine(
    catalog: Sequence[Product],
    skin_type: Optional[str],
    age: Optional[int] = None,
    anti_aging_age: int = rules.ANTI_AGING_AGE,
) -> list[Product]:
    """Cleanser, toner, serum and cream led by skin type.

    From `anti_aging_age` on, serum and cream also lean towards anti-age
    products.
    """
    key = getattr(skin_type, "value", skin_type)
    focus = BASE_FOCUS.get(key, ()) if key else ()
    mature = age is not None and age >= anti_aging_age
    treatment_focus = ((rules.WRINKLES,) + focus) if mature else focus

    steps = (
        StepSpec(Category.DETERGENTE.value, focus),
        StepSpec(Category.TONICO.value, focus),
        StepSpec(Category.SIERO.value, treatment_focus),
        StepSpec(Category.CREMA_VISO.value, treatment_focus),
    )
    return _build(catalog, skin_type, steps)


def build_routine(
    condition: PrimaryCondition,
    catalog: Sequence[Product],
    skin_type: Optional[str],
    age: Optional[int] = None,
    anti_aging_age: int = rules.ANTI_AGING_AGE,
) -> list[Product]:
    match condition:
        case PrimaryCondition.ROSACEA:
            return build_rosacea_routine(catalog, skin_type)
        case PrimaryCondition.ACNE:
            return build_acne_routine(catalog, skin_type)
        case PrimaryCondition.SENSITIVE:
            return build_sensitive_routine(catalog, skin_type)
        case _:
            return build_base_routine(catalog, skin_type, age, anti_aging_age)
