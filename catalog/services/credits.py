"""Credit ledger: affordability checks and balance changes for creators.

The pure functions never touch storage; ``charge`` and ``award_engagement``
re-read the persisted balance, apply the change and write it back.
"""

from typing import TYPE_CHECKING

from catalog.core.exceptions import BadRequestError, InsufficientCreditsError, NotFoundError
from catalog.core.logging import get_logger
from catalog.models.moderation_request import RequestAction
from catalog.models.user import User

if TYPE_CHECKING:
    from catalog.services.store import Store

log = get_logger(__name__)

CREDIT_COSTS = {
    RequestAction.UPLOAD: 10,
    RequestAction.EDIT: 5,
    RequestAction.DELETE: 5,
    RequestAction.PROMOTE: 10,
}

CREATOR_SIGNUP_CREDITS = 10
ADMIN_CREDITS = 9999

# Sponsor-link visits a creator must complete before being paid out
ENGAGEMENT_TARGET = 10
ENGAGEMENT_REWARD = 10


def cost_of(action: RequestAction | str) -> int:
    return CREDIT_COSTS[RequestAction(action)]


def can_afford(user: User, cost: int) -> bool:
    return user.credits >= cost


def debit(user: User, cost: int) -> User:
    """Return a copy of ``user`` with ``cost`` removed; the input is untouched."""
    if cost < 0:
        raise BadRequestError("Cost must be non-negative")
    if not can_afford(user, cost):
        raise InsufficientCreditsError(required=cost, available=user.credits)
    return user.model_copy(update={"credits": user.credits - cost})


def credit(user: User, amount: int) -> User:
    if amount < 0:
        raise BadRequestError("Amount must be non-negative")
    return user.model_copy(update={"credits": user.credits + amount})


def get_pricing() -> dict[str, int]:
    return {action.value: cost for action, cost in CREDIT_COSTS.items()}


async def _load_user(store: "Store", user_id: str) -> User:
    user = await store.get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def charge(store: "Store", user_id: str, action: RequestAction) -> User:
    """Debit the cost of ``action`` from the stored balance and persist it."""
    user = await _load_user(store, user_id)
    cost = cost_of(action)
    charged = debit(user, cost)
    await store.update_user(charged)
    log.info("credits_charged", user_id=user_id, action=RequestAction(action).value, cost=cost, balance=charged.credits)
    return charged


async def award_engagement(store: "Store", user_id: str, completed_events: int) -> User:
    """Pay the engagement reward once the caller has observed enough sponsor visits."""
    if completed_events < ENGAGEMENT_TARGET:
        raise BadRequestError(
            "Engagement not complete",
            details={"completed": completed_events, "required": ENGAGEMENT_TARGET},
        )
    user = await _load_user(store, user_id)
    rewarded = credit(user, ENGAGEMENT_REWARD)
    await store.update_user(rewarded)
    log.info("credits_awarded", user_id=user_id, amount=ENGAGEMENT_REWARD, balance=rewarded.credits)
    await store.audit(user_id, "credits_awarded", "user", user_id, {"amount": ENGAGEMENT_REWARD})
    return rewarded


async def balance_of(store: "Store", user_id: str) -> int:
    """Return current balance for user (0 if no profile)."""
    user = await store.get_user(user_id)
    return user.credits if user else 0
