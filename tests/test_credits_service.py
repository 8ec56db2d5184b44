"""Credit charges and rewards persisted through the store."""

import pytest

from catalog.core.exceptions import BadRequestError, InsufficientCreditsError, NotFoundError
from catalog.models.moderation_request import RequestAction
from catalog.services import credits as credits_service

pytestmark = pytest.mark.asyncio


async def test_charge_persists_debit(store, creator):
    charged = await credits_service.charge(store, creator.id, RequestAction.DELETE)
    assert charged.credits == 5
    assert await credits_service.balance_of(store, creator.id) == 5


async def test_charge_insufficient_leaves_balance(store, creator):
    await credits_service.charge(store, creator.id, RequestAction.UPLOAD)
    with pytest.raises(InsufficientCreditsError):
        await credits_service.charge(store, creator.id, RequestAction.EDIT)
    assert await credits_service.balance_of(store, creator.id) == 0


async def test_charge_reads_stored_balance(store, creator):
    # another writer spent most of the balance after the caller fetched it
    await store.adapter.patch("users", creator.id, {"credits": 3})
    assert creator.credits == 10
    with pytest.raises(InsufficientCreditsError):
        await credits_service.charge(store, creator.id, RequestAction.UPLOAD)
    assert await credits_service.balance_of(store, creator.id) == 3


async def test_award_engagement_requires_target(store, creator):
    with pytest.raises(BadRequestError):
        await credits_service.award_engagement(store, creator.id, credits_service.ENGAGEMENT_TARGET - 1)
    assert await credits_service.balance_of(store, creator.id) == 10

    rewarded = await credits_service.award_engagement(store, creator.id, credits_service.ENGAGEMENT_TARGET)
    assert rewarded.credits == 20
    assert await credits_service.balance_of(store, creator.id) == 20


async def test_unknown_user(store):
    with pytest.raises(NotFoundError):
        await credits_service.charge(store, "usr_missing", RequestAction.UPLOAD)
    assert await credits_service.balance_of(store, "usr_missing") == 0
