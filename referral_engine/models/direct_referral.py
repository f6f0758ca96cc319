"""
DirectReferral model.

A referrer's ordered list of direct children, one row per child.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.models.base import Base


class DirectReferral(Base):
    """
    DirectReferral entity.

    Appending a child is a single INSERT; the row id gives the append order.

    Attributes:
        id: Primary key (append order)
        referrer_id: Parent user
        referral_id: Child user (a user has at most one parent)
        created_at: When the child was appended
    """

    __tablename__ = "direct_referrals"
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    referrer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referral_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<DirectReferral(referrer_id={self.referrer_id}, "
            f"referral_id={self.referral_id})>"
        )
