"""
FunnelService: the results step of the quiz.

Reads the active catalog once, runs the recommender, persists the lead and
returns everything the results page shows. Catalog and persistence failures
are logged and degrade the answer; they never fail the request.
"""

import logging
import re
import unicodedata
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from scanbeauty.config import Settings, get_settings
from scanbeauty.errors import log_error, user_friendly_error
from scanbeauty.recommender import (
    RecommendationPolicy,
    get_personalized_message,
    get_recommended_products,
)
from scanbeauty.recommender.engine import filter_by_product_type
from scanbeauty.repository import LeadRepository
from scanbeauty.schemas import Product, QuizSubmission, RecommendationResponse

logger = logging.getLogger(__name__)

CATALOG_UNAVAILABLE = "Impossibile caricare i prodotti raccomandati"


def make_discount_code(prefix: str, name: str) -> str:
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    return prefix + re.sub(r"[^A-Z0-9]", "", ascii_name.upper())


def price_summary(products: list[Product], discount_rate: float) -> tuple[float, float, float]:
    """Total, discounted total and savings, rounded to cents."""
    total = round(sum(p.price for p in products), 2)
    discounted = round(total * (1 - discount_rate), 2)
    return total, discounted, round(total - discounted, 2)


class FunnelService:
    def __init__(self, repo: Optional[LeadRepository] = None, settings: Optional[Settings] = None):
        self.repo = repo or LeadRepository()
        self.settings = settings or get_settings()
        self.policy = RecommendationPolicy(
            anti_aging_age=self.settings.anti_aging_age,
            stack_targeted_products=self.settings.stack_targeted_products,
        )

    async def _rollback(self, db: Optional[AsyncSession]) -> None:
        # A failed read aborts the transaction; the lead insert reuses the session.
        if db is not None:
            await db.rollback()

    async def load_catalog(self, db: AsyncSession) -> Optional[list[Product]]:
        """Active catalog, or None when it could not be read."""
        try:
            rows = await self.repo.get_active_products(db)
        except Exception as e:
            log_error(e, "load_catalog")
            await self._rollback(db)
            return None
        return [Product.model_validate(row) for row in rows]

    async def list_products(self, db: AsyncSession, product_type: Optional[str] = None) -> list[Product]:
        catalog = await self.load_catalog(db) or []
        if not product_type:
            return catalog
        return filter_by_product_type(catalog, product_type)

    async def products_by_ids(self, db: AsyncSession, product_ids: list[str]) -> list[Product]:
        try:
            rows = await self.repo.get_products_by_ids(db, product_ids)
        except Exception as e:
            log_error(e, "products_by_ids")
            await self._rollback(db)
            return []
        return [Product.model_validate(row) for row in rows]

    async def complete_quiz(self, db: AsyncSession, submission: QuizSubmission) -> RecommendationResponse:
        profile = submission.to_profile()
        notice: Optional[str] = None

        catalog = await self.load_catalog(db)
        if catalog is None:
            notice = CATALOG_UNAVAILABLE
            products: list[Product] = []
        else:
            products = get_recommended_products(profile, catalog, self.policy)

        message = get_personalized_message(profile, anti_aging_age=self.policy.anti_aging_age)
        discount_code = make_discount_code(self.settings.discount_code_prefix, submission.name)

        lead_id: Optional[int] = None
        try:
            contact = await self.repo.create_lead(
                db, submission, discount_code, [p.id for p in products]
            )
            lead_id = contact.id
        except Exception as e:
            log_error(e, "save_lead")
            notice = notice or user_friendly_error(e)

        total, discounted, savings = price_summary(products, self.settings.discount_rate)

        logger.info(
            f"Quiz completed | Lead: {lead_id} | Products: {len(products)} | "
            f"Type: {profile.product_type or 'routine'}"
        )
        return RecommendationResponse(
            products=products,
            message=message,
            discount_code=discount_code,
            total=total,
            discounted_total=discounted,
            savings=savings,
            lead_id=lead_id,
            notice=notice,
        )
