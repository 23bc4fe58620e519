"""Create catalog tables.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', sa.String(36), primary_key=True)


def _org() -> sa.Column:
    return sa.Column('organization_id', sa.String(100), nullable=False, index=True)


def _ref(name: str, target: str, ondelete: str | None = None, index: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.String(36),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=False,
        index=index,
    )


def upgrade() -> None:
    """Create registry, product, variant and stock tables."""
    # Registry tables
    op.create_table(
        'product_attributes',
        _id(),
        _org(),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.UniqueConstraint('organization_id', 'slug', name='uq_attributes_org_slug'),
    )

    op.create_table(
        'product_attribute_terms',
        _id(),
        _org(),
        _ref('attribute_id', 'product_attributes.id', ondelete='CASCADE'),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.UniqueConstraint(
            'organization_id', 'attribute_id', 'slug', name='uq_terms_org_attribute_slug'
        ),
    )

    op.create_table(
        'product_categories',
        _id(),
        _org(),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('image', sa.String(1000), nullable=True),
        sa.Column(
            'parent_id',
            sa.String(36),
            sa.ForeignKey('product_categories.id'),
            nullable=True,
            index=True,
        ),
        sa.UniqueConstraint('organization_id', 'slug', name='uq_categories_org_slug'),
    )

    # Products table
    op.create_table(
        'products',
        _id(),
        _org(),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('sku', sa.String(100), nullable=True, index=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, index=True),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Product-owned link tables
    op.create_table(
        'product_category_assignments',
        _id(),
        _org(),
        _ref('product_id', 'products.id', ondelete='CASCADE'),
        _ref('category_id', 'product_categories.id', ondelete='CASCADE'),
        sa.UniqueConstraint('product_id', 'category_id', name='uq_category_assignments'),
    )

    op.create_table(
        'product_attribute_assignments',
        _id(),
        _org(),
        _ref('product_id', 'products.id', ondelete='CASCADE'),
        _ref('attribute_id', 'product_attributes.id'),
        sa.Column('used_for_variation', sa.Boolean(), nullable=False, server_default='false'),
        sa.UniqueConstraint('product_id', 'attribute_id', name='uq_attribute_assignments'),
    )

    op.create_table(
        'product_terms',
        _id(),
        _org(),
        _ref('product_id', 'products.id', ondelete='CASCADE'),
        _ref('attribute_id', 'product_attributes.id', index=False),
        _ref('term_id', 'product_attribute_terms.id'),
        sa.UniqueConstraint('product_id', 'term_id', name='uq_product_terms'),
    )

    # Variants and their rows
    op.create_table(
        'product_variants',
        _id(),
        _org(),
        _ref('product_id', 'products.id', ondelete='CASCADE'),
        sa.Column('sku', sa.String(100), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    op.create_table(
        'product_variant_terms',
        _id(),
        _org(),
        _ref('variant_id', 'product_variants.id', ondelete='CASCADE'),
        _ref('attribute_id', 'product_attributes.id', index=False),
        _ref('term_id', 'product_attribute_terms.id'),
        sa.UniqueConstraint('variant_id', 'attribute_id', name='uq_variant_terms_variant_attribute'),
    )

    op.create_table(
        'product_stock',
        _id(),
        _org(),
        _ref('variant_id', 'product_variants.id', ondelete='CASCADE'),
        sa.Column('country_code', sa.String(2), nullable=False),
        sa.Column('stock_level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('visibility', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('manage_stock', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('allow_backorder', sa.Boolean(), nullable=False, server_default='false'),
        sa.UniqueConstraint('variant_id', 'country_code', name='uq_stock_variant_country'),
    )


def downgrade() -> None:
    """Drop all catalog tables."""
    op.drop_table('product_stock')
    op.drop_table('product_variant_terms')
    op.drop_table('product_variants')
    op.drop_table('product_terms')
    op.drop_table('product_attribute_assignments')
    op.drop_table('product_category_assignments')
    op.drop_table('products')
    op.drop_table('product_categories')
    op.drop_table('product_attribute_terms')
    op.drop_table('product_attributes')
