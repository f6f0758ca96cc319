"""
User model.

Represents a participant of the referral network.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.config.business_constants import (
    MAX_REFERRAL_DEPTH,
    REFERRAL_CODE_LENGTH,
)
from referral_engine.models.base import Base
from referral_engine.models.enums import FeeTier, LinkStatus
from referral_engine.models.types import MoneyType


class User(Base):
    """
    User entity.

    Structural fields (code, parent, depth, link status) are written only
    by the referral directory. Running totals are written only through
    atomic increments.

    Attributes:
        id: Primary key
        referral_code: Unique code other users register under
        referrer_id: Direct referrer (parent), None for roots
        referral_depth: Number of ancestors (0..MAX_REFERRAL_DEPTH)
        fee_tier: BASE or REDUCED
        custom_commission_structure: Raw custom structure document
        total_xp_earned: XP (mirrors commission and cashback)
        total_commission_earned: Commissions received as a referrer
        total_cashback_earned: Cashback received as a trader
        is_active: Account flag
        link_status: CREATED until appended to the referrer's child list
        created_at: Registration time
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            f'referral_depth >= 0 AND referral_depth <= {MAX_REFERRAL_DEPTH}',
            name='check_user_referral_depth_range',
        ),
        CheckConstraint(
            'total_xp_earned >= 0',
            name='check_user_total_xp_non_negative',
        ),
        CheckConstraint(
            'total_commission_earned >= 0',
            name='check_user_total_commission_non_negative',
        ),
        CheckConstraint(
            'total_cashback_earned >= 0',
            name='check_user_total_cashback_non_negative',
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Referral
    referral_code: Mapped[str] = mapped_column(
        String(REFERRAL_CODE_LENGTH), nullable=False, unique=True, index=True
    )
    referrer_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    referral_depth: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    link_status: Mapped[str] = mapped_column(
        String(20), default=LinkStatus.LINKED, nullable=False, index=True
    )

    # Fees and commissions
    fee_tier: Mapped[str] = mapped_column(
        String(20), default=FeeTier.BASE, nullable=False
    )
    custom_commission_structure: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
        default=None,
        comment="Tagged document: KOL_DIRECT | KOL_CUSTOM | WAIVED",
    )

    # Running totals
    total_xp_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_commission_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_cashback_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Status flags
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    @property
    def is_root(self) -> bool:
        """True if user has no referrer."""
        return self.referrer_id is None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, referral_code={self.referral_code}, "
            f"referrer_id={self.referrer_id}, depth={self.referral_depth})>"
        )
