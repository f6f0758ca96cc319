"""
Trade service.

Records trades and distributes their fees: persists the trade, the
commission rows and the balance increments of every recipient.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.models.enums import TradeStatus
from referral_engine.models.trade import Trade
from referral_engine.repositories.commission_repository import (
    CommissionRepository,
)
from referral_engine.repositories.trade_repository import TradeRepository
from referral_engine.repositories.user_repository import UserRepository
from referral_engine.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)
from referral_engine.services.trade.fee_distribution import (
    FeeDistribution,
    FeeDistributionEngine,
)
from referral_engine.utils.datetime_utils import utc_now
from referral_engine.utils.exceptions import InvalidInputError, NotFoundError
from referral_engine.utils.money import MONEY
from referral_engine.validators.common import (
    ensure_valid,
    validate_chain,
    validate_positive_amount,
    validate_side,
    validate_token,
    validate_user_id,
)


MAX_PAGE_SIZE = 100


def trade_to_dict(trade: Trade) -> dict[str, Any]:
    """
    Wire representation of a trade.

    Args:
        trade: Trade entity

    Returns:
        Dict of trade fields, amounts as decimal strings
    """
    return {
        "id": trade.id,
        "user_id": trade.user_id,
        "volume": trade.volume,
        "fee_rate": trade.fee_rate,
        "total_fee": trade.total_fee,
        "cashback_amount": trade.cashback_amount,
        "treasury_amount": trade.treasury_amount,
        "total_commissions": trade.total_commissions,
        "token": trade.token,
        "chain": trade.chain,
        "side": trade.side,
        "status": trade.status,
        "commissions_distributed": trade.commissions_distributed,
        "distributed_at": (
            trade.distributed_at.isoformat() if trade.distributed_at else None
        ),
        "created_at": trade.created_at.isoformat(),
    }


@dataclass
class TradeResult:
    """Recorded trade and its fee split."""

    trade: Trade
    distribution: FeeDistribution

    def to_dict(self) -> dict[str, Any]:
        """Wire representation."""
        return {
            "trade": trade_to_dict(self.trade),
            "distribution": self.distribution.to_dict(),
        }


@dataclass
class PaginatedResult:
    """One page of trades."""

    data: list[Trade]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        """True if later pages exist."""
        return self.page * self.limit < self.total

    def to_dict(self) -> dict[str, Any]:
        """Wire representation."""
        return {
            "data": [trade_to_dict(trade) for trade in self.data],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "has_more": self.has_more,
        }


class TradeService(BaseService):
    """Trade ledger: trades, commission rows and balance increments."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize trade service."""
        super().__init__(session)
        self.trade_repo = TradeRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.user_repo = UserRepository(session)
        self.fee_engine = FeeDistributionEngine(session)

    @log_operation
    async def record_trade(
        self,
        user_id: int | str,
        volume: str | int | Decimal,
        token: str,
        side: str,
        chain: str,
    ) -> TradeResult:
        """
        Record a trade and distribute its fee.

        The trade is committed first in CREATED state; commission rows,
        balance increments and the flip to DISTRIBUTED then share one
        transaction. If that transaction fails the trade stays CREATED
        with commissions_distributed=False.

        Args:
            user_id: Trader user ID
            volume: Positive trade volume (decimal string preferred)
            token: Fee token symbol
            side: BUY or SELL
            chain: ARBITRUM or SOLANA

        Returns:
            TradeResult with the DISTRIBUTED trade and its fee split

        Raises:
            InvalidInputError: If any input is malformed
            NotFoundError: If the trader does not exist
        """
        user_id = ensure_valid(validate_user_id(user_id))
        trader = await self.user_repo.get_by_id(user_id)
        if trader is None:
            raise NotFoundError(f"User {user_id} not found")

        volume = ensure_valid(validate_positive_amount(volume))
        chain = ensure_valid(validate_chain(chain))
        side = ensure_valid(validate_side(side))
        token = ensure_valid(validate_token(token))

        distribution = await self.fee_engine.distribute(
            trader, volume, chain, token
        )

        trade = await self.trade_repo.create(
            user_id=trader.id,
            volume=MONEY.to_wire(volume),
            fee_rate=MONEY.to_wire(distribution.fee_rate),
            total_fee=MONEY.to_wire(distribution.total_fee),
            cashback_amount=MONEY.to_wire(distribution.cashback),
            treasury_amount=MONEY.to_wire(distribution.treasury),
            total_commissions=MONEY.to_wire(distribution.total_commissions),
            token=token,
            chain=chain,
            side=side,
            status=TradeStatus.CREATED,
            commissions_distributed=False,
        )
        await self.commit()

        await self._apply_distribution(trade, distribution)

        self.logger.info(
            "Trade recorded",
            extra={
                "trade_id": trade.id,
                "user_id": trader.id,
                "total_fee": trade.total_fee,
                "commissions": len(distribution.commissions),
            },
        )

        return TradeResult(trade=trade, distribution=distribution)

    @transaction
    async def _apply_distribution(
        self, trade: Trade, distribution: FeeDistribution
    ) -> None:
        """Persist commissions and balance increments, then flip the trade."""
        await self.commission_repo.bulk_create([
            {
                "user_id": entry.user_id,
                "source_user_id": distribution.trader_id,
                "trade_id": trade.id,
                "level": entry.level,
                "amount": MONEY.to_wire(entry.amount),
                "rate": MONEY.to_wire(entry.rate),
                "trade_volume": MONEY.to_wire(distribution.volume),
                "trade_fee": MONEY.to_wire(distribution.total_fee),
                "token": distribution.token,
                "chain": distribution.chain,
                "is_claimed": False,
            }
            for entry in distribution.commissions
        ])

        for entry in distribution.commissions:
            await self.user_repo.increment_balances(
                entry.user_id,
                total_commission_earned=entry.amount,
                total_xp_earned=entry.amount,
            )

        if distribution.cashback > 0:
            await self.user_repo.increment_balances(
                distribution.trader_id,
                total_cashback_earned=distribution.cashback,
                total_xp_earned=distribution.cashback,
            )

        trade.status = TradeStatus.DISTRIBUTED
        trade.commissions_distributed = True
        trade.distributed_at = utc_now()
        await self.session.flush()

    async def get_trade(self, trade_id: int) -> Trade:
        """
        Get trade by ID.

        Raises:
            NotFoundError: If the trade does not exist
        """
        trade = await self.trade_repo.get_by_id(trade_id)
        if trade is None:
            raise NotFoundError(f"Trade {trade_id} not found")
        return trade

    async def get_trades_by_user(
        self, user_id: int | str, page: int = 1, limit: int = 20
    ) -> PaginatedResult:
        """
        Get a trader's trades, newest first.

        Args:
            user_id: Trader user ID
            page: Page number (1-indexed)
            limit: Items per page (at most MAX_PAGE_SIZE)

        Returns:
            PaginatedResult

        Raises:
            InvalidInputError: If the identifier or paging is invalid
        """
        user_id = ensure_valid(validate_user_id(user_id))
        if page < 1:
            raise InvalidInputError("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise InvalidInputError(
                f"limit must be between 1 and {MAX_PAGE_SIZE}"
            )

        trades, total = await self.trade_repo.get_by_user_paginated(
            user_id, page=page, per_page=limit
        )
        return PaginatedResult(data=trades, total=total, page=page, limit=limit)

    async def list_trades(self, user_id: int | None = None) -> list[Trade]:
        """All trades, optionally for one trader, newest first."""
        return await self.trade_repo.list_newest_first(user_id=user_id)

    async def find_undistributed_trades(self, limit: int = 100) -> list[Trade]:
        """Trades whose distribution transaction did not complete."""
        return await self.trade_repo.find_undistributed(limit=limit)
