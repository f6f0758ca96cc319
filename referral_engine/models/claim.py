"""
Claim model.

Request to withdraw accumulated commission or cashback.
Execution (signing, settlement) happens outside the engine.
"""

from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.models.base import Base
from referral_engine.models.enums import ClaimStatus
from referral_engine.models.types import DecimalStringType


class Claim(Base):
    """
    Claim entity.

    Status only advances: PENDING -> PROCESSING -> COMPLETED | FAILED,
    or PENDING -> FAILED.

    Attributes:
        id: Primary key
        user_id: Beneficiary
        amount: Requested amount
        token: Payout token (USDC)
        chain: Payout chain
        status: Lifecycle status
        claim_type: COMMISSION or CASHBACK
        commission_ids: Commissions covered by the claim
        transaction_hash: Settlement transaction
        merkle_root: Merkle root of the payout tree
        merkle_proof: Merkle proof for this claim
        failure_reason: Why the claim failed
        completed_at: When the claim completed
        created_at: When the claim was requested
    """

    __tablename__ = "claims"
    __table_args__ = (
        Index('ix_claims_user_status', 'user_id', 'status'),
        Index('ix_claims_user_created', 'user_id', 'created_at'),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    amount: Mapped[str] = mapped_column(DecimalStringType, nullable=False)
    token: Mapped[str] = mapped_column(String(16), nullable=False)
    chain: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=ClaimStatus.PENDING, nullable=False, index=True
    )
    claim_type: Mapped[str] = mapped_column(String(20), nullable=False)
    commission_ids: Mapped[list[int]] = mapped_column(
        JSON, default=list, nullable=False
    )
    transaction_hash: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )
    merkle_root: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )
    merkle_proof: Mapped[list[str] | None] = mapped_column(
        JSON, nullable=True
    )
    failure_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Claim(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
