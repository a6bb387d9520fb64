"""
Catalog and lead repository: all DB access in one place.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scanbeauty.models.db import Contact, ContactProduct, Product
from scanbeauty.schemas import QuizSubmission

logger = logging.getLogger(__name__)


class LeadRepository:
    """Single repository for catalog reads and lead writes."""

    async def get_active_products(self, db: AsyncSession) -> list[Product]:
        result = await db.execute(
            select(Product).where(Product.active.is_(True)).order_by(Product.created_at, Product.id)
        )
        return list(result.scalars().all())

    async def get_products_by_ids(self, db: AsyncSession, product_ids: Sequence[str]) -> list[Product]:
        if not product_ids:
            return []
        result = await db.execute(
            select(Product).where(Product.id.in_(product_ids), Product.active.is_(True))
        )
        by_id = {p.id: p for p in result.scalars().all()}
        return [by_id[pid] for pid in product_ids if pid in by_id]

    async def create_lead(
        self,
        db: AsyncSession,
        submission: QuizSubmission,
        discount_code: str,
        product_ids: Sequence[str],
    ) -> Contact:
        """Store the contact, link its recommended products and bump counters."""
        contact = Contact(
            name=submission.full_name or submission.name,
            email=str(submission.email),
            phone=submission.phone,
            skin_type=submission.skin_type.value if submission.skin_type else None,
            age=submission.age,
            concerns=list(submission.concerns),
            product_type=submission.product_type,
            additional_info=submission.additional_info,
            discount_code=discount_code,
            skin_scores=submission.skin_scores.model_dump() if submission.skin_scores else None,
        )
        try:
            db.add(contact)
            await db.flush()

            for position, product_id in enumerate(product_ids):
                db.add(ContactProduct(contact_id=contact.id, product_id=product_id, position=position))

            if product_ids:
                await db.execute(
                    update(Product)
                    .where(Product.id.in_(list(product_ids)))
                    .values(times_recommended=Product.times_recommended + 1)
                )

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(contact)
        logger.info(f"Created lead {contact.id} with {len(product_ids)} products")
        return contact

    async def get_all_leads(
        self,
        db: AsyncSession,
        limit: Optional[int] = None,
        q: Optional[str] = None,
        skin_type: Optional[str] = None,
    ) -> list[Contact]:
        """Newest first. `q` matches name, email or phone; `skin_type` is exact."""
        stmt = select(Contact).order_by(Contact.created_at.desc())
        if q:
            pattern = f"%{q}%"
            stmt = stmt.where(or_(
                Contact.name.ilike(pattern),
                Contact.email.ilike(pattern),
                Contact.phone.ilike(pattern),
            ))
        if skin_type:
            stmt = stmt.where(Contact.skin_type == skin_type)
        if limit:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_lead(self, db: AsyncSession, lead_id: int) -> Optional[Contact]:
        result = await db.execute(
            select(Contact)
            .where(Contact.id == lead_id)
            .options(selectinload(Contact.products).selectinload(ContactProduct.product))
        )
        return result.scalar_one_or_none()

    async def get_top_products(self, db: AsyncSession, limit: int = 10) -> list[Product]:
        result = await db.execute(
            select(Product).order_by(Product.times_recommended.desc(), Product.name).limit(limit)
        )
        return list(result.scalars().all())
