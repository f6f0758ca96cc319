"""
Integration tests for ClaimService.

Tests cover:
- Claims within and above the claimable balance
- Input rejection
- Forward-only status transitions
- Marking commissions claimed on completion
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from referral_engine.models import Claim, ClaimStatus, Commission
from referral_engine.services import ClaimService, TradeService
from referral_engine.utils.exceptions import InvalidInputError, NotFoundError


@pytest.fixture
def funded(session, make_user):
    """
    Factory for referrer -> trader after one 10000 BASE trade.

    Referrer holds 30 unclaimed commission, trader 10 cashback.
    Returns plain IDs so tests survive session rollbacks.
    """
    async def _funded():
        referrer = await make_user()
        trader = await make_user(referrer=referrer)
        await TradeService(session).record_trade(
            trader.id, "10000", "BTC", "BUY", "ARBITRUM"
        )
        return referrer.id, trader.id

    return _funded


async def count_claims(session) -> int:
    return await session.scalar(select(func.count(Claim.id)))


class TestRequestClaim:
    """Test claim requests."""

    @pytest.mark.asyncio
    async def test_commission_claim_pending(self, session, funded):
        """A valid commission claim is PENDING and lists its commissions."""
        referrer_id, trader_id = await funded()
        service = ClaimService(session)

        claim = await service.request_claim(
            referrer_id, "30", "arbitrum", "commission"
        )

        commission_ids = list(await session.scalars(
            select(Commission.id).where(Commission.user_id == referrer_id)
        ))
        assert claim.status == ClaimStatus.PENDING
        assert claim.token == "USDC"
        assert claim.chain == "ARBITRUM"
        assert claim.amount == "30"
        assert claim.claim_type == "COMMISSION"
        assert claim.commission_ids == commission_ids

    @pytest.mark.asyncio
    async def test_partial_cashback_claim(self, session, funded):
        """Cashback claims up to the running total are accepted."""
        referrer_id, trader_id = await funded()

        claim = await ClaimService(session).request_claim(
            trader_id, "2.5", "SOLANA", "CASHBACK"
        )

        assert claim.amount == "2.5"
        assert claim.commission_ids == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "claim_type,amount",
        [
            ("COMMISSION", "30.000000000000000001"),
            ("CASHBACK", "10.5"),
        ],
    )
    async def test_over_claim_rejected(
        self, session, funded, claim_type, amount
    ):
        """Claims above the claimable balance create no claim."""
        referrer_id, trader_id = await funded()
        user_id = referrer_id if claim_type == "COMMISSION" else trader_id

        with pytest.raises(InvalidInputError, match="exceeds"):
            await ClaimService(session).request_claim(
                user_id, amount, "ARBITRUM", claim_type
            )

        assert await count_claims(session) == 0

    @pytest.mark.asyncio
    async def test_cashback_not_claimable_by_referrer(self, session, funded):
        """Commission and cashback balances are separate."""
        referrer_id, trader_id = await funded()

        with pytest.raises(InvalidInputError):
            await ClaimService(session).request_claim(
                referrer_id, "1", "ARBITRUM", "CASHBACK"
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "amount,chain,claim_type",
        [
            ("0", "ARBITRUM", "COMMISSION"),
            ("-1", "ARBITRUM", "COMMISSION"),
            ("abc", "ARBITRUM", "COMMISSION"),
            ("1e61", "ARBITRUM", "COMMISSION"),
            ("1_0", "ARBITRUM", "COMMISSION"),
            ("1", "BITCOIN", "COMMISSION"),
            ("1", "ARBITRUM", "BONUS"),
        ],
    )
    async def test_invalid_input(
        self, session, funded, amount, chain, claim_type
    ):
        """Malformed amounts, chains and types are rejected."""
        referrer_id, trader_id = await funded()

        with pytest.raises(InvalidInputError):
            await ClaimService(session).request_claim(
                referrer_id, amount, chain, claim_type
            )

        assert await count_claims(session) == 0

    @pytest.mark.asyncio
    async def test_unknown_user(self, session):
        """Unknown users are not found."""
        with pytest.raises(NotFoundError):
            await ClaimService(session).request_claim(
                999, "1", "ARBITRUM", "CASHBACK"
            )


class TestAdvanceClaim:
    """Test claim status transitions."""

    @pytest.mark.asyncio
    async def test_completion_marks_commissions(self, session, funded):
        """Completing a commission claim marks its commissions claimed."""
        referrer_id, trader_id = await funded()
        service = ClaimService(session)
        claim = await service.request_claim(
            referrer_id, "30", "ARBITRUM", "COMMISSION"
        )

        await service.advance_claim(claim.id, "PROCESSING")
        completed = await service.advance_claim(
            claim.id,
            ClaimStatus.COMPLETED,
            transaction_hash="0xabc",
            merkle_root="0xroot",
            merkle_proof=["0x01", "0x02"],
        )

        assert completed.status == ClaimStatus.COMPLETED
        assert completed.completed_at is not None
        assert completed.transaction_hash == "0xabc"

        commissions = list(await session.scalars(
            select(Commission).where(Commission.user_id == referrer_id)
        ))
        assert all(c.is_claimed for c in commissions)
        assert all(c.merkle_root == "0xroot" for c in commissions)
        assert all(c.claimed_at is not None for c in commissions)

    @pytest.mark.asyncio
    async def test_claimable_drops_after_completion(self, session, funded):
        """Claimed commissions leave the claimable balance."""
        referrer_id, trader_id = await funded()
        service = ClaimService(session)
        claim = await service.request_claim(
            referrer_id, "30", "ARBITRUM", "COMMISSION"
        )
        await service.advance_claim(claim.id, "PROCESSING")
        await service.advance_claim(claim.id, "COMPLETED")

        claimable = await service.earnings_manager.claimable_amount(
            referrer_id
        )

        assert claimable.commission == Decimal("0")

    @pytest.mark.asyncio
    async def test_pending_can_fail(self, session, funded):
        """PENDING claims may fail directly, keeping commissions open."""
        referrer_id, trader_id = await funded()
        service = ClaimService(session)
        claim = await service.request_claim(
            referrer_id, "30", "ARBITRUM", "COMMISSION"
        )

        failed = await service.advance_claim(
            claim.id, "FAILED", failure_reason="signer offline"
        )

        assert failed.status == ClaimStatus.FAILED
        assert failed.failure_reason == "signer offline"
        claimable = await service.earnings_manager.claimable_amount(
            referrer_id
        )
        assert claimable.commission == Decimal("30")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path,target",
        [
            ([], "COMPLETED"),
            ([], "PENDING"),
            (["PROCESSING"], "PENDING"),
            (["FAILED"], "PROCESSING"),
            (["PROCESSING", "COMPLETED"], "FAILED"),
        ],
    )
    async def test_illegal_transitions(self, session, funded, path, target):
        """Status never skips ahead or regresses."""
        referrer_id, trader_id = await funded()
        service = ClaimService(session)
        claim = await service.request_claim(
            referrer_id, "30", "ARBITRUM", "COMMISSION"
        )
        claim_id = claim.id
        for status in path:
            await service.advance_claim(claim_id, status)
        expected = path[-1] if path else "PENDING"

        with pytest.raises(InvalidInputError):
            await service.advance_claim(claim_id, target)

        claim = await session.get(Claim, claim_id)
        assert claim.status == expected

    @pytest.mark.asyncio
    async def test_unknown_status(self, session, funded):
        """Unknown statuses are rejected."""
        referrer_id, trader_id = await funded()
        service = ClaimService(session)
        claim = await service.request_claim(
            referrer_id, "30", "ARBITRUM", "COMMISSION"
        )

        with pytest.raises(InvalidInputError):
            await service.advance_claim(claim.id, "SETTLED")

    @pytest.mark.asyncio
    async def test_unknown_claim(self, session):
        """Unknown claims are not found."""
        with pytest.raises(NotFoundError):
            await ClaimService(session).advance_claim(999, "PROCESSING")

    @pytest.mark.asyncio
    async def test_get_claims(self, session, funded):
        """Claims are listed newest first."""
        referrer_id, trader_id = await funded()
        service = ClaimService(session)
        first = await service.request_claim(
            referrer_id, "10", "ARBITRUM", "COMMISSION"
        )
        second = await service.request_claim(
            referrer_id, "5", "SOLANA", "COMMISSION"
        )

        assert [c.id for c in await service.get_claims(referrer_id)] == [
            second.id,
            first.id,
        ]
