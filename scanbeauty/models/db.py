"""
SQLAlchemy models: catalog and leads.

`products`: catalog rows, managed outside the funnel (read-only here apart
from the analytics counters)
`contacts`: one row per completed quiz (the lead)
`contact_products`: products recommended to a lead
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from scanbeauty.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    step = Column(String(50))
    price = Column(Float, nullable=False, default=0.0)
    brand = Column(String(100))
    description_short = Column(Text)
    description_long = Column(Text)
    how_to_use = Column(Text)
    inci = Column(Text)
    product_url = Column(String(500), nullable=False, default="")
    image_url = Column(String(500))
    key_ingredients = Column(JSON, default=list)
    concerns_treated = Column(JSON, default=list)
    skin_types = Column(JSON, default=list)
    active = Column(Boolean, nullable=False, default=True, index=True)
    times_recommended = Column(Integer, nullable=False, default=0)
    times_clicked = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name})>"


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100))
    email = Column(String(255), index=True)
    phone = Column(String(30))
    skin_type = Column(String(20))
    age = Column(Integer)
    concerns = Column(JSON, default=list)
    product_type = Column(String(50))
    additional_info = Column(Text)
    discount_code = Column(String(120))
    skin_scores = Column(JSON, default=None)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    products = relationship(
        "ContactProduct", back_populates="contact", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Contact(id={self.id}, email={self.email})>"


class ContactProduct(Base):
    __tablename__ = "contact_products"

    contact_id = Column(
        Integer, ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True
    )
    product_id = Column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    position = Column(Integer, nullable=False, default=0)

    contact = relationship("Contact", back_populates="products")
    product = relationship("Product")
