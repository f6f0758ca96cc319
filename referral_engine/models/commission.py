"""
Commission model.

One row per (trade, beneficiary) created at distribution time.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.models.base import Base
from referral_engine.models.types import DecimalStringType


class Commission(Base):
    """
    Commission entity.

    Immutable except for the claim fields, which only move forward
    (unclaimed -> claimed).

    Attributes:
        id: Primary key
        user_id: Beneficiary (ancestor of the trader)
        source_user_id: Trader who generated the fee
        trade_id: Originating trade
        level: Beneficiary's level above the trader (1-3)
        amount: Commission amount
        rate: Rate applied to the trade fee
        trade_volume: Trade volume snapshot
        trade_fee: Trade fee snapshot
        token: Fee token
        chain: Settlement chain
        is_claimed: Whether the commission was claimed
        claimed_at: When it was claimed
        merkle_root: Claim merkle root
        merkle_proof: Claim merkle proof
        created_at: Distribution time
    """

    __tablename__ = "commissions"
    __table_args__ = (
        UniqueConstraint(
            'trade_id', 'user_id', name='uq_commission_trade_beneficiary'
        ),
        CheckConstraint(
            'level >= 1 AND level <= 3', name='check_commission_level_range'
        ),
        Index('ix_commissions_user_claimed', 'user_id', 'is_claimed'),
        Index('ix_commissions_user_created', 'user_id', 'created_at'),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Parties
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    source_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    trade_id: Mapped[int] = mapped_column(
        ForeignKey("trades.id"), nullable=False, index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Amounts (wire strings)
    amount: Mapped[str] = mapped_column(DecimalStringType, nullable=False)
    rate: Mapped[str] = mapped_column(DecimalStringType, nullable=False)
    trade_volume: Mapped[str] = mapped_column(
        DecimalStringType, nullable=False
    )
    trade_fee: Mapped[str] = mapped_column(DecimalStringType, nullable=False)

    # Market
    token: Mapped[str] = mapped_column(String(32), nullable=False)
    chain: Mapped[str] = mapped_column(String(20), nullable=False)

    # Claim state
    is_claimed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    merkle_root: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )
    merkle_proof: Mapped[list[str] | None] = mapped_column(
        JSON, nullable=True
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
            f"<Commission(id={self.id}, user_id={self.user_id}, "
            f"level={self.level}, amount={self.amount})>"
        )
