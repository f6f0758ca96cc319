"""
Claim service.

Validates claim requests against the claimable balance and tracks claim
status. Settlement itself happens outside the engine.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.config.business_constants import CLAIM_TOKEN
from referral_engine.models.claim import Claim
from referral_engine.models.enums import ClaimStatus, ClaimType
from referral_engine.repositories.claim_repository import ClaimRepository
from referral_engine.repositories.commission_repository import (
    CommissionRepository,
)
from referral_engine.repositories.user_repository import UserRepository
from referral_engine.services.base_service import BaseService, transaction
from referral_engine.services.referral.earnings_manager import (
    ReferralEarningsManager,
)
from referral_engine.utils.datetime_utils import utc_now
from referral_engine.utils.exceptions import InvalidInputError, NotFoundError
from referral_engine.utils.money import MONEY
from referral_engine.validators.common import (
    ensure_valid,
    validate_chain,
    validate_claim_type,
    validate_positive_amount,
    validate_user_id,
)


# Forward-only claim lifecycle
CLAIM_TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.PENDING: frozenset({ClaimStatus.PROCESSING, ClaimStatus.FAILED}),
    ClaimStatus.PROCESSING: frozenset({
        ClaimStatus.COMPLETED,
        ClaimStatus.FAILED,
    }),
    ClaimStatus.COMPLETED: frozenset(),
    ClaimStatus.FAILED: frozenset(),
}


class ClaimService(BaseService):
    """Claim request validation and status tracking."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize claim service."""
        super().__init__(session)
        self.claim_repo = ClaimRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.user_repo = UserRepository(session)
        self.earnings_manager = ReferralEarningsManager(session)

    @transaction
    async def request_claim(
        self,
        user_id: int | str,
        amount: str | int | Decimal,
        chain: str,
        claim_type: str,
    ) -> Claim:
        """
        Request a claim of commission or cashback.

        Args:
            user_id: Claiming user ID
            amount: Positive amount, at most the claimable balance
            chain: Payout chain
            claim_type: COMMISSION or CASHBACK

        Returns:
            PENDING claim

        Raises:
            InvalidInputError: If input is malformed or exceeds the balance
            NotFoundError: If the user does not exist
        """
        user_id = ensure_valid(validate_user_id(user_id))
        chain = ensure_valid(validate_chain(chain))
        claim_type = ensure_valid(validate_claim_type(claim_type))
        amount = ensure_valid(validate_positive_amount(amount))

        if await self.user_repo.get_by_id(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

        claimable = await self.earnings_manager.claimable_amount(user_id)
        available = (
            claimable.commission
            if claim_type == ClaimType.COMMISSION
            else claimable.cashback
        )

        if amount > available:
            self.logger.warning(
                "Claim exceeds claimable balance",
                extra={
                    "user_id": user_id,
                    "claim_type": claim_type,
                    "requested": MONEY.to_wire(amount),
                    "available": MONEY.to_wire(available),
                },
            )
            raise InvalidInputError("Claim amount exceeds claimable balance")

        claim = await self.claim_repo.create(
            user_id=user_id,
            amount=MONEY.to_wire(amount),
            token=CLAIM_TOKEN,
            chain=chain,
            status=ClaimStatus.PENDING,
            claim_type=claim_type,
            commission_ids=(
                list(claimable.commission_ids)
                if claim_type == ClaimType.COMMISSION
                else []
            ),
        )

        self.logger.info(
            "Claim requested",
            extra={
                "claim_id": claim.id,
                "user_id": user_id,
                "claim_type": claim_type,
                "amount": claim.amount,
            },
        )

        return claim

    @transaction
    async def advance_claim(
        self,
        claim_id: int,
        status: str,
        transaction_hash: str | None = None,
        merkle_root: str | None = None,
        merkle_proof: list[str] | None = None,
        failure_reason: str | None = None,
    ) -> Claim:
        """
        Move a claim forward in its lifecycle.

        Completing a COMMISSION claim marks its commissions claimed.

        Args:
            claim_id: Claim ID
            status: Target status
            transaction_hash: Settlement transaction (COMPLETED)
            merkle_root: Payout merkle root
            merkle_proof: Payout merkle proof
            failure_reason: Why the claim failed (FAILED)

        Returns:
            Updated claim

        Raises:
            NotFoundError: If the claim does not exist
            InvalidInputError: If the transition is not allowed
        """
        try:
            target = ClaimStatus(str(status).strip().upper())
        except ValueError as e:
            raise InvalidInputError(f"Unknown claim status: {status}") from e

        claim = await self.claim_repo.get_by_id(claim_id)
        if claim is None:
            raise NotFoundError(f"Claim {claim_id} not found")

        current = ClaimStatus(claim.status)
        if target not in CLAIM_TRANSITIONS[current]:
            raise InvalidInputError(
                f"Claim cannot move from {current} to {target}"
            )

        claim.status = target
        if merkle_root is not None:
            claim.merkle_root = merkle_root
        if merkle_proof is not None:
            claim.merkle_proof = merkle_proof

        if target == ClaimStatus.COMPLETED:
            now = utc_now()
            claim.completed_at = now
            claim.transaction_hash = transaction_hash
            if claim.claim_type == ClaimType.COMMISSION:
                marked = await self.commission_repo.mark_claimed(
                    claim.commission_ids,
                    claimed_at=now,
                    merkle_root=merkle_root,
                    merkle_proof=merkle_proof,
                )
                self.logger.debug(
                    "Commissions marked claimed",
                    extra={"claim_id": claim.id, "count": marked},
                )
        elif target == ClaimStatus.FAILED:
            claim.failure_reason = failure_reason

        await self.session.flush()

        self.logger.info(
            "Claim status advanced",
            extra={
                "claim_id": claim.id,
                "from_status": current,
                "to_status": target,
            },
        )

        return claim

    async def get_claims(self, user_id: int) -> list[Claim]:
        """User's claims, newest first."""
        return await self.claim_repo.get_by_user(user_id)
