"""catalog_and_leads

Revision ID: 5c2e9a7d41b0
Revises:
Create Date: 2026-10-17 10:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c2e9a7d41b0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    existing_tables = sa.inspect(bind).get_table_names()

    # init_db may already have created the tables
    if 'products' not in existing_tables:
        op.create_table('products',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('category', sa.String(length=50), nullable=False),
            sa.Column('step', sa.String(length=50), nullable=True),
            sa.Column('price', sa.Float(), nullable=False),
            sa.Column('brand', sa.String(length=100), nullable=True),
            sa.Column('description_short', sa.Text(), nullable=True),
            sa.Column('description_long', sa.Text(), nullable=True),
            sa.Column('how_to_use', sa.Text(), nullable=True),
            sa.Column('inci', sa.Text(), nullable=True),
            sa.Column('product_url', sa.String(length=500), nullable=False),
            sa.Column('image_url', sa.String(length=500), nullable=True),
            sa.Column('key_ingredients', sa.JSON(), nullable=True),
            sa.Column('concerns_treated', sa.JSON(), nullable=True),
            sa.Column('skin_types', sa.JSON(), nullable=True),
            sa.Column('active', sa.Boolean(), nullable=False),
            sa.Column('times_recommended', sa.Integer(), nullable=False),
            sa.Column('times_clicked', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_products_category'), 'products', ['category'], unique=False)
        op.create_index(op.f('ix_products_active'), 'products', ['active'], unique=False)

    if 'contacts' not in existing_tables:
        op.create_table('contacts',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('name', sa.String(length=100), nullable=True),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('phone', sa.String(length=30), nullable=True),
            sa.Column('skin_type', sa.String(length=20), nullable=True),
            sa.Column('age', sa.Integer(), nullable=True),
            sa.Column('concerns', sa.JSON(), nullable=True),
            sa.Column('product_type', sa.String(length=50), nullable=True),
            sa.Column('additional_info', sa.Text(), nullable=True),
            sa.Column('discount_code', sa.String(length=120), nullable=True),
            sa.Column('skin_scores', sa.JSON(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_contacts_id'), 'contacts', ['id'], unique=False)
        op.create_index(op.f('ix_contacts_email'), 'contacts', ['email'], unique=False)
        op.create_index(op.f('ix_contacts_created_at'), 'contacts', ['created_at'], unique=False)

    if 'contact_products' not in existing_tables:
        op.create_table('contact_products',
            sa.Column('contact_id', sa.Integer(), nullable=False),
            sa.Column('product_id', sa.String(length=36), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('contact_id', 'product_id')
        )


def downgrade() -> None:
    op.drop_table('contact_products')
    op.drop_index(op.f('ix_contacts_created_at'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_email'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_id'), table_name='contacts')
    op.drop_table('contacts')
    op.drop_index(op.f('ix_products_active'), table_name='products')
    op.drop_index(op.f('ix_products_category'), table_name='products')
    op.drop_table('products')
