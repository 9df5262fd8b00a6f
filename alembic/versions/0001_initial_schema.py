"""Initial booking and folio ledger schema

Revision ID: 0001
Revises:
Create Date: 2024-05-20 09:12:31.402118

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "properties",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'USD'")),
        sa.Column("default_rate_plan_id", sa.String(36), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )

    op.create_table(
        "room_types",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("code", sa.String(16), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("base_rate_cents", sa.Integer(), nullable=True),
    )
    op.create_index("ix_room_types_property_id", "room_types", ["property_id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("room_type_id", sa.String(36), sa.ForeignKey("room_types.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("TRUE")),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("housekeeping_status", sa.String(20), nullable=False),
    )
    op.create_index("ix_rooms_property_id", "rooms", ["property_id"])

    op.create_table(
        "blocks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "room_id", sa.String(36), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
    )
    op.create_index("ix_blocks_property_id", "blocks", ["property_id"])
    op.create_index("ix_blocks_room_id", "blocks", ["room_id"])

    op.create_table(
        "rate_plans",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("TRUE")),
    )
    op.create_index("ix_rate_plans_property_id", "rate_plans", ["property_id"])

    op.create_table(
        "rate_plan_room_types",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "rate_plan_id",
            sa.String(36),
            sa.ForeignKey("rate_plans.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "room_type_id",
            sa.String(36),
            sa.ForeignKey("room_types.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("nightly_rate_cents", sa.Integer(), nullable=False),
        sa.UniqueConstraint("rate_plan_id", "room_type_id"),
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False),
        sa.Column("guest_name", sa.String(120), nullable=False),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("channel", sa.String(), nullable=True),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_reservations_property_id", "reservations", ["property_id"])

    op.create_table(
        "stay_segments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "reservation_id",
            sa.String(36),
            sa.ForeignKey("reservations.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("room_id", sa.String(36), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("room_type_id", sa.String(36), sa.ForeignKey("room_types.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("adults", sa.Integer(), nullable=False),
        sa.Column("children", sa.Integer(), nullable=False),
        sa.CheckConstraint("end_date > start_date", name="ck_stay_segments_dates"),
    )
    op.create_index("ix_stay_segments_property_id", "stay_segments", ["property_id"])
    op.create_index("ix_stay_segments_room_id", "stay_segments", ["room_id"])

    op.create_table(
        "folios",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "reservation_id",
            sa.String(36),
            sa.ForeignKey("reservations.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_folios_property_id", "folios", ["property_id"])

    op.create_table(
        "folio_lines",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(36),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "folio_id",
            sa.String(36),
            sa.ForeignKey("folios.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("charge_type", sa.String(20), nullable=True),
        sa.Column("payment_method", sa.String(20), nullable=True),
        sa.Column("date_key", sa.String(10), nullable=False),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "reversal_of_line_id",
            sa.String(36),
            sa.ForeignKey("folio_lines.id"),
            nullable=True,
            unique=True,
        ),
        sa.Column("created_by", sa.String(), nullable=True),
    )
    op.create_index("ix_folio_lines_property_id", "folio_lines", ["property_id"])
    op.create_index("ix_folio_lines_folio_id", "folio_lines", ["folio_id"])
    op.create_index("ix_folio_lines_date_key", "folio_lines", ["date_key"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("folio_lines")
    op.drop_table("folios")
    op.drop_table("stay_segments")
    op.drop_table("reservations")
    op.drop_table("rate_plan_room_types")
    op.drop_table("rate_plans")
    op.drop_table("blocks")
    op.drop_table("rooms")
    op.drop_table("room_types")
    op.drop_table("properties")
