"""create trades table

Revision ID: 0001_create_trades_table
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_create_trades_table"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "trades",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("trade_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("entry_time", sa.String(5), nullable=True),
        sa.Column("exit_time", sa.String(5), nullable=True),
        sa.Column("trade_type", sa.String(20), nullable=False),
        sa.Column("instrument", sa.String(100), nullable=False),
        sa.Column("trade_direction", sa.String(10), nullable=False),
        sa.Column("avg_buy_price", sa.Numeric(18, 8), nullable=False),
        sa.Column("avg_sell_price", sa.Numeric(18, 8), nullable=False),
        sa.Column("position_size", sa.Numeric(18, 8), nullable=False),
        sa.Column("leverage", sa.Numeric(10, 2), nullable=False, server_default="1"),
        sa.Column("base_currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("pnl", sa.Numeric(18, 2), nullable=False),
        sa.Column("pnl_percentage", sa.Numeric(18, 4), nullable=True),
        sa.Column("risk_reward_ratio", sa.Numeric(10, 2), nullable=True),
        sa.Column("emotional_state", sa.String(20), nullable=False),
        sa.Column("is_impulsive", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("initial_notes", sa.Text(), nullable=True),
        sa.Column("setup_confidence", sa.Integer(), nullable=True),
        sa.Column("strategy", sa.String(100), nullable=True),
        sa.Column("stop_loss_price", sa.Numeric(18, 8), nullable=True),
        sa.Column("take_profit_price", sa.Numeric(18, 8), nullable=True),
        sa.Column("deviated_from_plan", sa.Boolean(), nullable=True),
        sa.Column("deviation_reason", sa.Text(), nullable=True),
        sa.Column("stress_level", sa.Integer(), nullable=True),
        sa.Column("key_lesson", sa.Text(), nullable=True),
        sa.Column("what_went_well", sa.Text(), nullable=True),
        sa.Column("would_do_differently", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_index("ix_trades_id", "trades", ["id"])
    op.create_index("ix_trades_trade_date", "trades", ["trade_date"])
    op.create_index("ix_trades_instrument", "trades", ["instrument"])
    op.create_index("ix_trades_base_currency", "trades", ["base_currency"])


def downgrade():
    op.drop_index("ix_trades_base_currency", table_name="trades")
    op.drop_index("ix_trades_instrument", table_name="trades")
    op.drop_index("ix_trades_trade_date", table_name="trades")
    op.drop_index("ix_trades_id", table_name="trades")
    op.drop_table("trades")
