"""
Referral network module.

Materializes a user's downline (descendant tree) bounded to
MAX_REFERRAL_DEPTH levels, as a tree and as a pre-order flat list.
"""

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.config.business_constants import MAX_REFERRAL_DEPTH
from referral_engine.models.user import User
from referral_engine.repositories.user_repository import UserRepository


@dataclass
class NetworkNode:
    """A descendant of the network root."""

    user_id: int
    referral_code: str
    level: int
    joined_at: datetime
    direct_referrals: list["NetworkNode"] = field(default_factory=list)

    def to_dict(self, include_children: bool = True) -> dict:
        """
        Wire representation.

        Args:
            include_children: Render the subtree under ``direct_referrals``

        Returns:
            Dict with user_id, referral_code, level, joined_at
        """
        data = {
            "user_id": self.user_id,
            "referral_code": self.referral_code,
            "level": self.level,
            "joined_at": self.joined_at.isoformat(),
        }
        if include_children:
            data["direct_referrals"] = [
                child.to_dict() for child in self.direct_referrals
            ]
        return data


@dataclass
class NetworkResult:
    """Downline of a user."""

    tree: list[NetworkNode]
    data: list[NetworkNode]
    total: int

    def to_dict(self) -> dict:
        """Wire representation (flat list plus total)."""
        return {
            "data": [node.to_dict(include_children=False) for node in self.data],
            "total": self.total,
        }


def flatten_network(nodes: list[NetworkNode]) -> list[NetworkNode]:
    """
    Flatten a tree in pre-order (parent before its children).

    Args:
        nodes: Top-level nodes

    Returns:
        Flat list of nodes
    """
    result: list[NetworkNode] = []
    for node in nodes:
        result.append(node)
        result.extend(flatten_network(node.direct_referrals))
    return result


class ReferralNetworkManager:
    """Manages downline queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize network manager."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def build_network(
        self, root: User, depth: int = MAX_REFERRAL_DEPTH
    ) -> NetworkResult:
        """
        Build the downline of a user.

        Issues one query per level: the children of every node of the
        previous level are fetched together through the parent pointer.
        Per-parent order is join time, then user ID.

        Args:
            root: Network root (not included in the result)
            depth: Number of levels below the root

        Returns:
            NetworkResult with tree, pre-order flat list and total
        """
        tree: list[NetworkNode] = []
        nodes_by_id: dict[int, NetworkNode] = {}
        frontier = [root.id]

        for level in range(1, depth + 1):
            children = await self.user_repo.get_children_of(frontier)
            if not children:
                break

            frontier = []
            for child in children:
                if child.id in nodes_by_id or child.id == root.id:
                    # Corrupted parent pointers; never revisit a node
                    logger.warning(
                        "Referral cycle detected while building network",
                        extra={"root_id": root.id, "user_id": child.id},
                    )
                    continue

                node = NetworkNode(
                    user_id=child.id,
                    referral_code=child.referral_code,
                    level=level,
                    joined_at=child.created_at,
                )
                nodes_by_id[child.id] = node
                frontier.append(child.id)

                if level == 1:
                    tree.append(node)
                else:
                    nodes_by_id[child.referrer_id].direct_referrals.append(node)

        flat = flatten_network(tree)

        logger.debug(
            "Referral network built",
            extra={"root_id": root.id, "total": len(flat)},
        )

        return NetworkResult(tree=tree, data=flat, total=len(flat))
