from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from trade_journal.db.database import Base


class Trade(Base):
    __tablename__ = "trades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    trade_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    entry_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # HH:MM
    exit_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    trade_type: Mapped[str] = mapped_column(String(20))  # CRYPTO / STOCK / FUTURES / OPTIONS / FUNDED_ACCOUNT
    instrument: Mapped[str] = mapped_column(String(100), index=True)
    trade_direction: Mapped[str] = mapped_column(String(10))  # BUY_LONG / SELL_SHORT

    avg_buy_price: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    avg_sell_price: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    position_size: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    leverage: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("1"))

    base_currency: Mapped[str] = mapped_column(String(3), default="INR", index=True)

    # Written only by compute_trade_pnl
    pnl: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    pnl_percentage: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 4), nullable=True)
    risk_reward_ratio: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    emotional_state: Mapped[str] = mapped_column(String(20))
    is_impulsive: Mapped[bool] = mapped_column(Boolean, default=False)
    initial_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Pre-trade planning
    setup_confidence: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1-10
    strategy: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    stop_loss_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 8), nullable=True)
    take_profit_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 8), nullable=True)

    # Execution / reflection
    deviated_from_plan: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    deviation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    stress_level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1-10
    key_lesson: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    what_went_well: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    would_do_differently: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=func.now(),
    )
