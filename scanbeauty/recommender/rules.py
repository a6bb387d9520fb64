"""
Rule predicates over the visitor's concern set.

Rosacea, acne and sensitive skin form a priority chain: a visitor reporting
both acne and redness is treated for rosacea only, never for acne or for
sensitive skin. The remaining predicates are independent triggers for the
augmenters.

Labels are matched case-sensitively against the quiz vocabulary; anything
outside it is ignored.
"""

import enum
from typing import Iterable, Optional

ACNE = "acne"
REDNESS = "rossori"
WRINKLES = "rughe"
PIGMENTATION = "pigmentazione"
DARK_CIRCLES = "occhiaie"
ENLARGED_PORES = "pori_dilatati"
ELASTICITY = "elasticita"
NONE = "nessuna"

ANTI_AGING_AGE = 36


class PrimaryCondition(str, enum.Enum):
    ROSACEA = "rosacea"
    ACNE = "acne"
    SENSITIVE = "sensitive"
    BASE = "base"


def effective_concerns(concerns: Optional[Iterable[str]]) -> frozenset[str]:
    """Concern set used for matching; "nessuna" empties it."""
    labels = frozenset(concerns or ())
    if NONE in labels:
        return frozenset()
    return labels


def has_rosacea(concerns: Iterable[str]) -> bool:
    labels = effective_concerns(concerns)
    return ACNE in labels and REDNESS in labels


def has_acne(concerns: Iterable[str]) -> bool:
    labels = effective_concerns(concerns)
    return ACNE in labels and not has_rosacea(labels)


def has_sensitive_skin(concerns: Iterable[str]) -> bool:
    labels = effective_concerns(concerns)
    return REDNESS in labels and not has_rosacea(labels) and not has_acne(labels)


def has_pigmentation(concerns: Iterable[str]) -> bool:
    return PIGMENTATION in effective_concerns(concerns)


def has_anti_aging(
    concerns: Iterable[str], age: Optional[int], threshold: int = ANTI_AGING_AGE
) -> bool:
    if WRINKLES in effective_concerns(concerns):
        return True
    return age is not None and age >= threshold


def has_dark_circles(concerns: Iterable[str]) -> bool:
    return DARK_CIRCLES in effective_concerns(concerns)


def has_enlarged_pores(concerns: Iterable[str]) -> bool:
    return ENLARGED_PORES in effective_concerns(concerns)


def has_elasticity(concerns: Iterable[str]) -> bool:
    return ELASTICITY in effective_concerns(concerns)


def resolve_primary_condition(concerns: Iterable[str]) -> PrimaryCondition:
    """Pick the base routine; first match wins."""
    labels = effective_concerns(concerns)
    if has_rosacea(labels):
        return PrimaryCondition.ROSACEA
    if has_acne(labels):
        return PrimaryCondition.ACNE
    if has_sensitive_skin(labels):
        return PrimaryCondition.SENSITIVE
    return PrimaryCondition.BASE


# Concerns a product must treat to count as chosen *for* the condition.
CONDITION_CONCERNS: dict[PrimaryCondition, tuple[str, ...]] = {
    PrimaryCondition.ROSACEA: (REDNESS, ACNE),
    PrimaryCondition.ACNE: (ACNE,),
    PrimaryCondition.SENSITIVE: (REDNESS,),
    PrimaryCondition.BASE: (),
}
