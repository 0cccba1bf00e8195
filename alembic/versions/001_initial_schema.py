"""Initial schema — clients, contracts, charges, users, permissions.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("company_name", sa.String(200), nullable=False),
        sa.Column("trade_name", sa.String(200), nullable=True),
        sa.Column("document", sa.String(20), nullable=False),
        sa.Column("full_address", sa.String(500), nullable=True),
        sa.Column("postal_code", sa.String(10), nullable=True),
        sa.Column("billing_phone", sa.String(20), nullable=True),
        sa.Column("billing_email", sa.String(100), nullable=True),
        sa.Column("responsible_name", sa.String(100), nullable=True),
        sa.Column("responsible_cpf", sa.String(20), nullable=True),
        sa.Column("asaas_customer_id", sa.String(50), nullable=True),
        sa.Column("deleted", sa.Boolean, nullable=False, server_default="false"),
        *_timestamps(),
    )
    op.create_index("ix_clients_document", "clients", ["document"])
    op.create_index("ix_clients_asaas_customer_id", "clients", ["asaas_customer_id"])

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("client_id", sa.Integer, sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("recurring_amount", sa.Numeric(15, 2), nullable=True),
        sa.Column("down_payment", sa.Numeric(15, 2), nullable=True),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDENTE"),
        sa.Column("payment_type", sa.String(20), nullable=True),
        sa.Column("service", sa.String(50), nullable=True),
        sa.Column("contract_start", sa.Date, nullable=True),
        sa.Column("recurrence_start", sa.Date, nullable=True),
        sa.Column("sale_date", sa.Date, nullable=True),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("whatsapp", sa.String(20), nullable=True),
        sa.Column("contract_link", sa.String(500), nullable=True),
        sa.Column("signature_status", sa.String(20), nullable=False, server_default="PENDENTE"),
        sa.Column("project", sa.String(100), nullable=True),
        sa.Column("asaas_subscription_id", sa.String(50), nullable=True),
        sa.Column("deleted", sa.Boolean, nullable=False, server_default="false"),
        *_timestamps(),
    )
    op.create_index("ix_contracts_client_id", "contracts", ["client_id"])
    op.create_index("ix_contracts_asaas_subscription_id", "contracts", ["asaas_subscription_id"])

    op.create_table(
        "charges",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "contract_id", sa.Integer,
            sa.ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("payment_date", sa.Date, nullable=True),
        sa.Column("status", sa.String(40), nullable=False, server_default="PENDING"),
        sa.Column("asaas_payment_id", sa.String(50), nullable=True, unique=True),
        sa.Column("payment_link", sa.String(500), nullable=True),
        sa.Column("barcode", sa.String(100), nullable=True),
        sa.Column("installment_number", sa.Integer, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_charges_contract_id", "charges", ["contract_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="CLIENTE"),
        sa.Column("status", sa.String(20), nullable=False, server_default="ATIVO"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reset_token", sa.String(100), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_reset_token", "users", ["reset_token"])

    op.create_table(
        "permissions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("module", sa.String(30), nullable=False),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default="true"),
        sa.UniqueConstraint("user_id", "module", name="uq_permissions_user_module"),
    )


def downgrade() -> None:
    op.drop_table("permissions")
    op.drop_index("ix_users_reset_token", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_charges_contract_id", table_name="charges")
    op.drop_table("charges")
    op.drop_index("ix_contracts_asaas_subscription_id", table_name="contracts")
    op.drop_index("ix_contracts_client_id", table_name="contracts")
    op.drop_table("contracts")
    op.drop_index("ix_clients_asaas_customer_id", table_name="clients")
    op.drop_index("ix_clients_document", table_name="clients")
    op.drop_table("clients")
