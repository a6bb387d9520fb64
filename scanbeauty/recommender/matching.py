"""
Catalog matching helpers shared by the routine builders and the augmenters.

Catalog labels are free text written by the catalog team ("Pelle sensibile
o irritata", "Oleosità", "Pelle grassa"), so they are compared loosely:
accent- and case-insensitive, substring in either direction.
"""

import unicodedata
from typing import Iterable, Optional, Sequence

from scanbeauty.schemas import Product

# Quiz concern → labels used in the catalog's `concerns_treated`
CONCERN_MAP: dict[str, tuple[str, ...]] = {
    "acne": ("Acne", "Imperfezioni", "Eccesso di sebo"),
    "rossori": ("Rossori", "Pelle sensibile o irritata", "Lenitivo", "Couperose"),
    "rughe": ("Rughe", "Invecchiamento", "Anti-età", "Perdita di tono"),
    "pigmentazione": ("Pigmentazione", "Macchie e discromie", "Viso spento"),
    "pori_dilatati": ("Pori dilatati", "Texture uniforme"),
    "oleosita": ("Oleosità", "Eccesso di sebo", "Pelle lucida"),
    "danni_solari": ("Danni solari", "Fotoinvecchiamento", "Protezione solare"),
    "occhiaie": ("Occhiaie", "Borse"),
    "disidratazione": ("Idratazione", "Pelle secca", "Secchezza cutanea"),
    "elasticita": ("Elasticità", "Perdita di tono", "Pelle poco tonica o rilassata", "Rassodante"),
    "texture": ("Texture uniforme", "Grana irregolare"),
}

# Quiz skin type → catalog labels that name that same type
SKIN_TYPE_EXACT: dict[str, tuple[str, ...]] = {
    "secca": ("secca",),
    "grassa": ("grassa", "oleosa"),
    "mista": ("mista",),
    "normale": ("normale",),
    "asfittica": ("asfittica",),
}

# Quiz skin type → catalog labels for a close enough type
SKIN_TYPE_NEIGHBOURS: dict[str, tuple[str, ...]] = {
    "secca": ("normale",),
    "grassa": ("acneica",),
    "mista": ("normale",),
    "normale": ("mista",),
    "asfittica": ("acneica",),
}

UNIVERSAL_SKIN_LABELS = ("tutti", "tutte", "ogni tipo")

# Skin fit ranks, higher is better
FIT_EXACT = 2
FIT_UNIVERSAL = 1
FIT_NEIGHBOUR = 0


def normalize(text: Optional[str]) -> str:
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.casefold().split())


def _loosely_equal(a: str, b: str) -> bool:
    a, b = normalize(a), normalize(b)
    if not a or not b:
        return False
    return a in b or b in a


def treats(product: Product, concern: str) -> bool:
    """Whether the product lists the quiz concern among `concerns_treated`."""
    targets = CONCERN_MAP.get(concern, ()) + (concern,)
    return any(
        _loosely_equal(treated, target)
        for treated in product.concerns_treated
        for target in targets
    )


def concern_hits(product: Product, concerns: Iterable[str]) -> int:
    return sum(1 for concern in concerns if treats(product, concern))


def treats_any(product: Product, concerns: Iterable[str]) -> bool:
    return any(treats(product, concern) for concern in concerns)


def skin_fit(product: Product, skin_type: Optional[str]) -> Optional[int]:
    """Rank how well the product suits the skin type; None means unsuitable."""
    labels = [normalize(label) for label in product.skin_types if normalize(label)]
    if not labels or any(u in label for label in labels for u in UNIVERSAL_SKIN_LABELS):
        return FIT_UNIVERSAL
    if skin_type is None:
        return FIT_UNIVERSAL

    key = normalize(getattr(skin_type, "value", skin_type))
    exact = SKIN_TYPE_EXACT.get(key, (key,))
    if any(token in label for label in labels for token in exact):
        return FIT_EXACT
    neighbours = SKIN_TYPE_NEIGHBOURS.get(key, ())
    if any(token in label for label in labels for token in neighbours):
        return FIT_NEIGHBOUR
    return None


def same_category(product: Product, category: str) -> bool:
    return normalize(product.category) == normalize(category)


def active_only(catalog: Iterable[Product]) -> list[Product]:
    return [product for product in catalog if product.active]


def pick_best(
    catalog: Sequence[Product],
    category: str,
    skin_type: Optional[str],
    prefer: Sequence[str] = (),
    *,
    require_concern: bool = False,
    exclude_ids: Iterable[str] = (),
) -> Optional[Product]:
    """Best product for a routine step.

    Ranking: skin fit (exact > suits all > neighbouring type), then how many
    of `prefer` the product treats, then catalog order.
    """
    excluded = set(exclude_ids)
    best: Optional[Product] = None
    best_key: Optional[tuple[int, int]] = None

    for product in catalog:
        if not product.active or product.id in excluded:
            continue
        if not same_category(product, category):
            continue
        fit = skin_fit(product, skin_type)
        if fit is None:
            continue
        hits = concern_hits(product, prefer)
        if require_concern and hits == 0:
            continue
        key = (fit, hits)
        if best_key is None or key > best_key:
            best, best_key = product, key

    return best
