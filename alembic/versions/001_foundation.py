"""Foundation schema: vehicles, persons and historial.

Revision ID: 001_foundation
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001_foundation"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

VEHICLE_LIST_COLUMNS = (
    "highlighted_equipment",
    "general_features",
    "exterior",
    "comfort",
    "safety",
    "interior",
    "entertainment",
)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("created_by", sa.Text, nullable=True),
        sa.Column("updated_by", sa.Text, nullable=True),
        sa.Column(
            "active", sa.Boolean, nullable=False, server_default=sa.text("true")
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "vehicles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("plate", sa.Text, nullable=False),
        sa.Column("make", sa.Text, nullable=False),
        sa.Column("model", sa.Text, nullable=False),
        sa.Column("version", sa.Text, nullable=False, server_default=""),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("mileage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("price", sa.Numeric(14, 2), nullable=False),
        sa.Column("cost", sa.Numeric(14, 2), nullable=False),
        sa.Column("transmission", sa.Text, nullable=False),
        sa.Column("color", sa.Text, nullable=False),
        sa.Column(
            "status", sa.Text, nullable=False, server_default="POR_INGRESAR"
        ),
        sa.Column(
            "favorite", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        *[
            sa.Column(
                name,
                postgresql.ARRAY(sa.Text()),
                nullable=False,
                server_default=sa.text("'{}'::text[]"),
            )
            for name in VEHICLE_LIST_COLUMNS
        ],
        *_audit_columns(),
        sa.UniqueConstraint("plate", name="uq_vehicles_plate"),
        sa.CheckConstraint("price >= 0", name="ck_vehicles_price_non_negative"),
        sa.CheckConstraint("cost >= 0", name="ck_vehicles_cost_non_negative"),
        sa.CheckConstraint("mileage >= 0", name="ck_vehicles_mileage_non_negative"),
    )
    op.create_index("ix_vehicles_status", "vehicles", ["status"])
    op.create_index("ix_vehicles_favorite_active", "vehicles", ["favorite", "active"])
    op.create_index("ix_vehicles_created_at", "vehicles", ["created_at"])

    op.create_table(
        "persons",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("surname", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("password", sa.Text, nullable=False),
        sa.Column("phone", sa.Text, nullable=True),
        sa.Column("role", sa.Text, nullable=False, server_default="CLIENTE"),
        *_audit_columns(),
        sa.UniqueConstraint("email", name="uq_persons_email"),
    )

    op.create_table(
        "historial",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("entity_id", sa.Text, nullable=False),
        sa.Column("entity_type", sa.Text, nullable=False),
        sa.Column("action_kind", sa.Text, nullable=False),
        sa.Column("field_affected", sa.Text, nullable=True),
        sa.Column("value_before", sa.Text, nullable=True),
        sa.Column("value_after", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_audit_columns(),
    )
    op.create_index(
        "ix_historial_entity", "historial", ["entity_id", "entity_type"]
    )
    op.create_index("ix_historial_created_at", "historial", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_historial_created_at", table_name="historial")
    op.drop_index("ix_historial_entity", table_name="historial")
    op.drop_table("historial")
    op.drop_table("persons")
    op.drop_index("ix_vehicles_created_at", table_name="vehicles")
    op.drop_index("ix_vehicles_favorite_active", table_name="vehicles")
    op.drop_index("ix_vehicles_status", table_name="vehicles")
    op.drop_table("vehicles")
