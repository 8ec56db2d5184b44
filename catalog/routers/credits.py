from fastapi import APIRouter, Depends

from catalog.deps import get_current_user, get_store
from catalog.models.user import User
from catalog.services import credits as credits_service
from catalog.services.store import Store

router = APIRouter()


@router.get("/balance")
async def credits_balance(user: User = Depends(get_current_user), store: Store = Depends(get_store)):
    """Return current credit balance."""
    balance = await credits_service.balance_of(store, user.id)
    return {"balance": balance}


@router.get("/pricing")
async def credits_pricing():
    return {
        "costs": credits_service.get_pricing(),
        "engagement_target": credits_service.ENGAGEMENT_TARGET,
        "engagement_reward": credits_service.ENGAGEMENT_REWARD,
    }


@router.get("/earn-link")
async def credits_earn_link(store: Store = Depends(get_store)):
    settings = await store.get_app_settings()
    return {"earn_link": settings.earn_link}
