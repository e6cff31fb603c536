"""initial pricing schema

Revision ID: 0001_initial_pricing_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_pricing_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("discount_type", sa.String(), nullable=False),
        sa.Column("discount_value", sa.Float(), nullable=False),
        sa.Column("apply_to", sa.String(), nullable=False),
        sa.Column("category_ids", sa.JSON(), nullable=True),
        sa.Column("product_ids", sa.JSON(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("starts_at", sa.DateTime(), nullable=False),
        sa.Column("ends_at", sa.DateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("show_countdown", sa.Boolean(), nullable=False),
        sa.Column("banner_text", sa.String(), nullable=True),
        sa.Column("banner_color", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_sales_id", "sales", ["id"])
    op.create_index("ix_sales_starts_at", "sales", ["starts_at"])
    op.create_index("ix_sales_ends_at", "sales", ["ends_at"])
    op.create_index("ix_sales_is_active", "sales", ["is_active"])

    op.create_table(
        "products",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("sku", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("compare_at_price", sa.Float(), nullable=True),
        sa.Column("is_on_sale", sa.Boolean(), nullable=False),
        sa.Column("sale_percentage", sa.Float(), nullable=True),
        sa.Column("sale_amount", sa.Float(), nullable=True),
        sa.Column("sale_ends_at", sa.DateTime(), nullable=True),
        sa.Column(
            "active_sale_id",
            sa.Integer(),
            sa.ForeignKey("sales.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("category_id", sa.String(), nullable=True),
        sa.Column("subcategory_id", sa.String(), nullable=True),
        sa.Column("condition", sa.String(), nullable=True),
        sa.Column("brand", sa.String(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_products_id", "products", ["id"])
    op.create_index("ix_products_sku", "products", ["sku"], unique=True)
    op.create_index("ix_products_active_sale_id", "products", ["active_sale_id"])
    op.create_index("ix_products_status", "products", ["status"])
    op.create_index("ix_products_category_id", "products", ["category_id"])
    op.create_index("ix_products_subcategory_id", "products", ["subcategory_id"])

    op.create_table(
        "pricing_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("rule_type", sa.String(), nullable=False),
        sa.Column("adjustment_type", sa.String(), nullable=False),
        sa.Column("adjustment_value", sa.Float(), nullable=False),
        sa.Column("apply_to", sa.String(), nullable=False),
        sa.Column("category_ids", sa.JSON(), nullable=True),
        sa.Column("subcategory_ids", sa.JSON(), nullable=True),
        sa.Column("conditions", sa.JSON(), nullable=True),
        sa.Column("brands", sa.JSON(), nullable=True),
        sa.Column("min_price", sa.Float(), nullable=True),
        sa.Column("max_price", sa.Float(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_pricing_rules_id", "pricing_rules", ["id"])

    op.create_table(
        "bulk_price_updates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("change_reason", sa.String(), nullable=False),
        sa.Column("rule_id", sa.Integer(), nullable=True),
        sa.Column("adjustment_type", sa.String(), nullable=False),
        sa.Column("adjustment_value", sa.Float(), nullable=False),
        sa.Column("apply_to", sa.String(), nullable=False),
        sa.Column("target_ids", sa.JSON(), nullable=True),
        sa.Column("selector", sa.JSON(), nullable=True),
        sa.Column("affected_count", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("is_reverted", sa.Boolean(), nullable=False),
        sa.Column("reverted_at", sa.DateTime(), nullable=True),
        sa.Column("reverted_by", sa.String(), nullable=True),
    )
    op.create_index("ix_bulk_price_updates_id", "bulk_price_updates", ["id"])
    op.create_index("ix_bulk_price_updates_rule_id", "bulk_price_updates", ["rule_id"])
    op.create_index("ix_bulk_price_updates_created_at", "bulk_price_updates", ["created_at"])

    op.create_table(
        "price_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "product_id",
            sa.String(),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("previous_price", sa.Float(), nullable=False),
        sa.Column("new_price", sa.Float(), nullable=False),
        sa.Column("change_reason", sa.String(), nullable=False),
        sa.Column("rule_id", sa.Integer(), nullable=True),
        sa.Column(
            "bulk_update_id",
            sa.Integer(),
            sa.ForeignKey("bulk_price_updates.id"),
            nullable=True,
        ),
        sa.Column("changed_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_price_history_id", "price_history", ["id"])
    op.create_index("ix_price_history_product_id", "price_history", ["product_id"])
    op.create_index("ix_price_history_change_reason", "price_history", ["change_reason"])
    op.create_index("ix_price_history_rule_id", "price_history", ["rule_id"])
    op.create_index("ix_price_history_bulk_update_id", "price_history", ["bulk_update_id"])
    op.create_index("ix_price_history_created_at", "price_history", ["created_at"])

    op.create_table(
        "pricing_config",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("default_markup_percent", sa.Float(), nullable=False),
        sa.Column("minimum_margin", sa.Float(), nullable=False),
        sa.Column("rounding_rule", sa.String(), nullable=False),
        sa.Column("min_price_new_with_tags", sa.Float(), nullable=False),
        sa.Column("min_price_new_without_tags", sa.Float(), nullable=False),
        sa.Column("min_price_like_new", sa.Float(), nullable=False),
        sa.Column("min_price_good", sa.Float(), nullable=False),
        sa.Column("min_price_fair", sa.Float(), nullable=False),
        sa.Column("min_price_poor", sa.Float(), nullable=False),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_pricing_config_id", "pricing_config", ["id"])


def downgrade():
    op.drop_table("pricing_config")
    op.drop_table("price_history")
    op.drop_table("bulk_price_updates")
    op.drop_table("pricing_rules")
    op.drop_table("products")
    op.drop_table("sales")
