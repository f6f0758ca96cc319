"""
Referral service.

Manages referral codes, registration under a referrer, ancestor chains,
downline networks and earnings queries.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.config.business_constants import MAX_REFERRAL_DEPTH
from referral_engine.config.settings import settings
from referral_engine.models.enums import LinkStatus
from referral_engine.models.user import User
from referral_engine.repositories.commission_repository import (
    CommissionRepository,
)
from referral_engine.repositories.direct_referral_repository import (
    DirectReferralRepository,
)
from referral_engine.repositories.user_repository import UserRepository
from referral_engine.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)
from referral_engine.services.referral.chain_manager import (
    AncestorEntry,
    ReferralChainManager,
)
from referral_engine.services.referral.code_generator import (
    CodeGenerator,
    generate_referral_code,
)
from referral_engine.services.referral.earnings_manager import (
    ClaimableAmount,
    EarningsSummary,
    ReferralEarningsManager,
)
from referral_engine.services.referral.network_manager import (
    NetworkResult,
    ReferralNetworkManager,
)
from referral_engine.utils.datetime_utils import ensure_utc
from referral_engine.utils.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from referral_engine.utils.money import MONEY
from referral_engine.validators.common import (
    ensure_valid,
    validate_referral_code,
    validate_user_id,
)


@dataclass
class EarningsReport:
    """Earnings summary plus the user's cashback and XP totals."""

    summary: EarningsSummary
    total_cashback: Decimal
    total_xp: Decimal

    def to_dict(self) -> dict:
        """Wire representation."""
        data = self.summary.to_dict()
        data["total_cashback"] = MONEY.to_wire(self.total_cashback)
        data["total_xp"] = MONEY.to_wire(self.total_xp)
        return data


@dataclass
class UserOverview:
    """One row of the users listing."""

    user_id: int
    referral_code: str
    referrer_id: int | None
    referral_depth: int
    fee_tier: str
    joined_at: datetime
    total_cashback: Decimal
    total_xp: Decimal
    commissions_by_token: dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "user_id": self.user_id,
            "referral_code": self.referral_code,
            "referrer_id": self.referrer_id,
            "referral_depth": self.referral_depth,
            "fee_tier": self.fee_tier,
            "joined_at": self.joined_at.isoformat(),
            "total_cashback": MONEY.to_wire(self.total_cashback),
            "total_xp": MONEY.to_wire(self.total_xp),
            "commissions_by_token": {
                token: MONEY.to_wire(amount)
                for token, amount in self.commissions_by_token.items()
            },
        }


def _balance(value: Decimal | None) -> Decimal:
    """Normalize a running total read from the database."""
    return MONEY.parse(str(value if value is not None else 0))


class ReferralService(BaseService):
    """Referral directory: codes, registration, chains and networks."""

    def __init__(
        self,
        session: AsyncSession,
        code_generator: CodeGenerator | None = None,
        max_attempts: int | None = None,
    ) -> None:
        """
        Initialize referral service.

        Args:
            session: Async database session
            code_generator: Candidate code source (defaults to CSPRNG codes)
            max_attempts: Collision retries (defaults to settings)
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.direct_referral_repo = DirectReferralRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.chain_manager = ReferralChainManager(session)
        self.network_manager = ReferralNetworkManager(session)
        self.earnings_manager = ReferralEarningsManager(session)
        self.code_generator = code_generator or generate_referral_code
        self.max_attempts = (
            max_attempts or settings.code_generation_max_attempts
        )

    # ------------------------------------------------------------------
    # Codes and registration
    # ------------------------------------------------------------------

    async def _create_with_unique_code(self, **fields) -> User:
        """
        Insert a user under a freshly drawn code and commit.

        A code that already exists, or an insert that loses a race on the
        unique index, is discarded and a new one drawn.

        Raises:
            ConflictError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.code_generator()

            if await self.user_repo.referral_code_exists(code):
                self.logger.debug(
                    "Referral code collision",
                    extra={"attempt": attempt},
                )
                continue

            try:
                user = await self.user_repo.create(
                    referral_code=code, **fields
                )
                await self.commit()
                return user
            except IntegrityError as e:
                await self.rollback()
                if "referral_code" not in str(e.orig):
                    raise
                self.logger.debug(
                    "Referral code taken concurrently",
                    extra={"attempt": attempt},
                )

        self.logger.warning(
            "Referral code generation exhausted",
            extra={"attempts": self.max_attempts},
        )
        raise ConflictError("Referral code space exhausted")

    @log_operation
    async def generate_code(self) -> User:
        """
        Create a root user with a new unique referral code.

        Returns:
            Created user (no referrer, depth 0)

        Raises:
            ConflictError: If no unique code was found
        """
        user = await self._create_with_unique_code(
            referrer_id=None,
            referral_depth=0,
            link_status=LinkStatus.LINKED,
        )

        self.logger.info(
            "Root user created",
            extra={"user_id": user.id, "referral_code": user.referral_code},
        )

        return user

    @log_operation
    async def register_under(self, code: str) -> User:
        """
        Create a new user under the owner of a referral code.

        Written in two commits: the child is persisted in CREATED state
        with its parent pointer, then appended to the owner's child list
        and flipped to LINKED.

        Args:
            code: Referrer's referral code

        Returns:
            Created user

        Raises:
            NotFoundError: If no user owns the code
            InvalidInputError: If the owner is at maximum depth
            ConflictError: If no unique code was found
        """
        is_valid, normalized, _ = validate_referral_code(code)
        owner = (
            await self.user_repo.get_by_referral_code(normalized)
            if is_valid
            else None
        )
        if owner is None:
            raise NotFoundError("Referral code not found")

        owner_depth = await self.chain_manager.calculate_depth(owner)
        if owner_depth >= MAX_REFERRAL_DEPTH:
            raise InvalidInputError("Maximum referral depth reached")

        # Plain ints survive a rollback inside the code retry loop
        owner_id = owner.id

        child = await self._create_with_unique_code(
            referrer_id=owner_id,
            referral_depth=owner_depth + 1,
            link_status=LinkStatus.CREATED,
        )
        await self._link_child(owner_id, child)

        self.logger.info(
            "User registered under referrer",
            extra={
                "user_id": child.id,
                "referrer_id": owner_id,
                "referral_depth": child.referral_depth,
            },
        )

        return child

    @transaction
    async def _link_child(self, owner_id: int, child: User) -> None:
        """Append child to the owner's list and flip it to LINKED."""
        await self.direct_referral_repo.append(owner_id, child.id)
        child.link_status = LinkStatus.LINKED
        await self.session.flush()

    @log_operation
    async def repair_link(self, user_id: int) -> User:
        """
        Finish linking a user left in CREATED state.

        Args:
            user_id: User ID

        Returns:
            The user, LINKED

        Raises:
            NotFoundError: If the user does not exist
            InvalidInputError: If the user has no referrer
        """
        user = await self._get_user_or_raise(user_id)

        if user.link_status == LinkStatus.LINKED:
            return user
        if user.referrer_id is None:
            raise InvalidInputError("Root users have no referrer to link")

        child_ids = await self.direct_referral_repo.get_child_ids(
            user.referrer_id
        )
        if user.id in child_ids:
            user.link_status = LinkStatus.LINKED
            await self.session.flush()
            await self.commit()
        else:
            await self._link_child(user.referrer_id, user)

        return user

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _get_user_or_raise(self, user_id: int | str) -> User:
        user_id = ensure_valid(validate_user_id(user_id))
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def find_user(self, user_id: int) -> User | None:
        """
        Find user by ID.

        Args:
            user_id: User ID

        Returns:
            User or None
        """
        return await self.user_repo.get_by_id(user_id)

    async def find_user_by_referral_code(self, code: str) -> User | None:
        """
        Find user by referral code (case-insensitive).

        Args:
            code: Referral code

        Returns:
            User or None
        """
        is_valid, normalized, _ = validate_referral_code(code)
        if not is_valid:
            return None
        return await self.user_repo.get_by_referral_code(normalized)

    async def get_direct_referral_ids(self, user_id: int) -> list[int]:
        """
        Get a user's child list in append order.

        Args:
            user_id: User ID

        Returns:
            Child user IDs
        """
        return await self.direct_referral_repo.get_child_ids(user_id)

    async def find_unlinked_users(self, limit: int = 100) -> list[User]:
        """Users whose registration stopped between its two commits."""
        return await self.user_repo.find_unlinked(limit=limit)

    # ------------------------------------------------------------------
    # Chains and networks
    # ------------------------------------------------------------------

    async def get_ancestor_chain(
        self, user_id: int | str
    ) -> list[AncestorEntry]:
        """
        Get a user's ancestors, direct referrer first.

        Args:
            user_id: User ID

        Returns:
            Up to MAX_REFERRAL_DEPTH entries

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self._get_user_or_raise(user_id)
        return await self.chain_manager.get_ancestor_chain(user)

    async def get_network(self, user_id: int | str) -> NetworkResult:
        """
        Get a user's downline, MAX_REFERRAL_DEPTH levels deep.

        Args:
            user_id: Root user ID

        Returns:
            NetworkResult (tree, pre-order list, total)

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self._get_user_or_raise(user_id)
        return await self.network_manager.build_network(user)

    # ------------------------------------------------------------------
    # Earnings
    # ------------------------------------------------------------------

    async def get_earnings(
        self,
        user_id: int | str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> EarningsReport:
        """
        Get a user's commission earnings with cashback and XP totals.

        Args:
            user_id: User ID
            start_date: Optional inclusive lower bound
            end_date: Optional inclusive upper bound

        Returns:
            EarningsReport

        Raises:
            NotFoundError: If the user does not exist
            InvalidInputError: If start_date is after end_date
        """
        user = await self._get_user_or_raise(user_id)

        if start_date is not None:
            start_date = ensure_utc(start_date)
        if end_date is not None:
            end_date = ensure_utc(end_date)
        if start_date and end_date and start_date > end_date:
            raise InvalidInputError("start_date must not be after end_date")

        summary = await self.earnings_manager.earnings_for(
            user.id, start_date=start_date, end_date=end_date
        )

        return EarningsReport(
            summary=summary,
            total_cashback=_balance(user.total_cashback_earned),
            total_xp=_balance(user.total_xp_earned),
        )

    async def get_claimable(self, user_id: int | str) -> ClaimableAmount:
        """
        Get a user's claimable commission and cashback.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self._get_user_or_raise(user_id)
        return await self.earnings_manager.claimable_amount(user.id)

    async def list_users_overview(self) -> list[UserOverview]:
        """
        List all users, newest first, with balances.

        Commissions are summed per token in Python with the money policy.

        Returns:
            List of UserOverview
        """
        users = await self.user_repo.list_newest_first()

        amounts: dict[int, dict[str, list[Decimal]]] = defaultdict(
            lambda: defaultdict(list)
        )
        for row in await self.commission_repo.get_amounts_by_token():
            amounts[row.user_id][row.token].append(MONEY.parse(row.amount))

        return [
            UserOverview(
                user_id=user.id,
                referral_code=user.referral_code,
                referrer_id=user.referrer_id,
                referral_depth=user.referral_depth,
                fee_tier=user.fee_tier,
                joined_at=user.created_at,
                total_cashback=_balance(user.total_cashback_earned),
                total_xp=_balance(user.total_xp_earned),
                commissions_by_token={
                    token: MONEY.sum(values)
                    for token, values in sorted(amounts[user.id].items())
                },
            )
            for user in users
        ]
