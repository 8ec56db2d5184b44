from fastapi import APIRouter, Depends
from pydantic import BaseModel

from catalog.deps import get_store, require_creator
from catalog.models.movie import MovieChanges, MovieDraft
from catalog.models.user import User
from catalog.services import cascade
from catalog.services import credits as credits_service
from catalog.services import moderation
from catalog.services import movies as movies_service
from catalog.services.store import Store

router = APIRouter()


class EngagementReport(BaseModel):
    completed_events: int


@router.get("/movies")
async def creator_movies(user: User = Depends(require_creator), store: Store = Depends(get_store)):
    """All of the creator's movies, whatever their review status."""
    movies = movies_service.creator_listing(await store.get_movies(), user.id)
    total_views = sum(m.views for m in movies)
    return {"items": [m.to_document() for m in movies], "total_views": total_views}


@router.post("/movies")
async def creator_upload(body: MovieDraft, user: User = Depends(require_creator), store: Store = Depends(get_store)):
    """Submit a movie for review. Costs the upload price in credits."""
    movie, request = await moderation.submit_upload(store, user.id, body)
    balance = await credits_service.balance_of(store, user.id)
    return {"movie": movie.to_document(), "request": request.to_document(), "balance": balance}


@router.patch("/movies/{movie_id}")
async def creator_edit(
    movie_id: str,
    body: MovieChanges,
    user: User = Depends(require_creator),
    store: Store = Depends(get_store),
):
    movie = await movies_service.edit_movie(store, user, movie_id, body)
    return movie.to_document()


@router.delete("/movies/{movie_id}")
async def creator_delete(movie_id: str, user: User = Depends(require_creator), store: Store = Depends(get_store)):
    removed = await cascade.delete_own_movie(store, user, movie_id)
    balance = await credits_service.balance_of(store, user.id)
    return {"deleted": movie_id, "requests_removed": removed, "balance": balance}


@router.post("/credits/earn")
async def creator_earn(body: EngagementReport, user: User = Depends(require_creator), store: Store = Depends(get_store)):
    """Pay out the engagement reward once the sponsor-link task is complete."""
    rewarded = await credits_service.award_engagement(store, user.id, body.completed_events)
    return {"balance": rewarded.credits}
