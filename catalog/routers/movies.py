from fastapi import APIRouter, Depends, Query

from catalog.core.exceptions import NotFoundError
from catalog.core.pagination import paginate
from catalog.deps import get_optional_user, get_store
from catalog.models.status import ReviewStatus
from catalog.models.user import User
from catalog.services import movies as movies_service
from catalog.services.store import Store

router = APIRouter()


@router.get("")
async def movies_list(
    store: Store = Depends(get_store),
    category_id: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """Approved catalog, newest first."""
    limit, offset = paginate(limit, offset)
    movies = movies_service.viewer_listing(await store.get_movies())
    if category_id:
        movies = [m for m in movies if m.category_id == category_id]
    movies.sort(key=lambda m: m.created_at, reverse=True)
    return {
        "items": [m.to_document() for m in movies[offset:offset + limit]],
        "limit": limit,
        "offset": offset,
        "total": len(movies),
    }


@router.get("/categories")
async def movies_categories(store: Store = Depends(get_store)):
    return {"items": [c.to_document() for c in await store.get_categories()]}


@router.get("/by-category")
async def movies_by_category(store: Store = Depends(get_store)):
    """Approved catalog grouped under every category, empty ones included."""
    grouped = movies_service.group_by_category(movies_service.viewer_listing(await store.get_movies()))
    return {
        "items": [
            {"category": c.to_document(), "movies": [m.to_document() for m in grouped.get(c.id, [])]}
            for c in await store.get_categories()
        ]
    }


async def _visible_movie(store: Store, movie_id: str, user: User | None):
    movie = await store.get_movie(movie_id)
    if movie is None:
        raise NotFoundError("Movie not found")
    if movie.status != ReviewStatus.APPROVED:
        owner = user is not None and (user.is_admin or user.id == movie.creator_id)
        if not owner:
            raise NotFoundError("Movie not found")
    return movie


@router.get("/{movie_id}")
async def movies_get(movie_id: str, store: Store = Depends(get_store), user: User | None = Depends(get_optional_user)):
    movie = await _visible_movie(store, movie_id, user)
    return movie.to_document()


@router.get("/{movie_id}/related")
async def movies_related(movie_id: str, store: Store = Depends(get_store), user: User | None = Depends(get_optional_user)):
    movie = await _visible_movie(store, movie_id, user)
    related = movies_service.related_movies(await store.get_movies(), movie)
    return {"items": [m.to_document() for m in related]}


@router.post("/{movie_id}/views")
async def movies_view(movie_id: str, store: Store = Depends(get_store), user: User | None = Depends(get_optional_user)):
    await _visible_movie(store, movie_id, user)
    movie = await movies_service.record_view(store, movie_id)
    return {"id": movie.id, "views": movie.views}
