"""
Trade model.

One row per trade event; carries the fee split snapshot.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.models.base import Base
from referral_engine.models.enums import TradeStatus
from referral_engine.models.types import DecimalStringType


class Trade(Base):
    """
    Trade entity.

    Written in two phases: committed as CREATED, then flipped to
    DISTRIBUTED once commission rows and balance increments succeed.
    A CREATED trade with commissions_distributed=False is a trade whose
    distribution did not complete.

    Attributes:
        id: Primary key
        user_id: Trader
        volume: Trade volume
        fee_rate: Fee rate of the trader's tier at trade time
        total_fee: Fee charged
        cashback_amount: Fee share returned to the trader
        treasury_amount: Fee share retained by the platform
        total_commissions: Sum of commission amounts
        token: Token the fee is taken in (e.g. BTC)
        chain: ARBITRUM or SOLANA
        side: BUY or SELL
        status: CREATED or DISTRIBUTED
        commissions_distributed: True once distribution completed
        distributed_at: When distribution completed
        created_at: When the trade was recorded
    """

    __tablename__ = "trades"
    __table_args__ = (
        Index('ix_trades_user_created', 'user_id', 'created_at'),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Trader
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )

    # Amounts (wire strings)
    volume: Mapped[str] = mapped_column(DecimalStringType, nullable=False)
    fee_rate: Mapped[str] = mapped_column(DecimalStringType, nullable=False)
    total_fee: Mapped[str] = mapped_column(DecimalStringType, nullable=False)
    cashback_amount: Mapped[str] = mapped_column(
        DecimalStringType, nullable=False
    )
    treasury_amount: Mapped[str] = mapped_column(
        DecimalStringType, nullable=False
    )
    total_commissions: Mapped[str] = mapped_column(
        DecimalStringType, nullable=False
    )

    # Market
    token: Mapped[str] = mapped_column(String(32), nullable=False)
    chain: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    side: Mapped[str] = mapped_column(String(4), nullable=False)

    # Distribution state
    status: Mapped[str] = mapped_column(
        String(20), default=TradeStatus.CREATED, nullable=False
    )
    commissions_distributed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    distributed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Trade(id={self.id}, user_id={self.user_id}, "
            f"volume={self.volume}, status={self.status})>"
        )
