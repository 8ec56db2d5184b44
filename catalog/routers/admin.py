from fastapi import APIRouter, Depends
from pydantic import BaseModel

from catalog.deps import get_store, require_admin
from catalog.models.app_settings import AppSettings
from catalog.models.movie import MovieChanges
from catalog.models.status import ReviewStatus
from catalog.models.user import User
from catalog.routers.auth import user_out
from catalog.services import cascade, moderation
from catalog.services import movies as movies_service
from catalog.services.store import Store

router = APIRouter()


class SettingsUpdate(BaseModel):
    earn_link: str


@router.get("/requests")
async def admin_requests(
    status: ReviewStatus | None = None,
    user: User = Depends(require_admin),
    store: Store = Depends(get_store),
):
    """Moderation queue, newest first. Titles of deleted movies may be stale."""
    requests = await store.get_requests()
    if status is not None:
        requests = [r for r in requests if r.status == status]
    requests.sort(key=lambda r: r.timestamp, reverse=True)
    return {"items": [r.to_document() for r in requests]}


@router.post("/requests/{request_id}/approve")
async def admin_approve(request_id: str, user: User = Depends(require_admin), store: Store = Depends(get_store)):
    request = await moderation.resolve_request(store, request_id, True, user)
    return request.to_document()


@router.post("/requests/{request_id}/reject")
async def admin_reject(request_id: str, user: User = Depends(require_admin), store: Store = Depends(get_store)):
    request = await moderation.resolve_request(store, request_id, False, user)
    return request.to_document()


@router.get("/movies")
async def admin_movies(user: User = Depends(require_admin), store: Store = Depends(get_store)):
    movies = movies_service.admin_listing(await store.get_movies())
    return {"items": [m.to_document() for m in movies]}


@router.patch("/movies/{movie_id}")
async def admin_edit_movie(
    movie_id: str,
    body: MovieChanges,
    user: User = Depends(require_admin),
    store: Store = Depends(get_store),
):
    movie = await movies_service.edit_movie(store, user, movie_id, body)
    return movie.to_document()


@router.delete("/movies/{movie_id}")
async def admin_delete_movie(movie_id: str, user: User = Depends(require_admin), store: Store = Depends(get_store)):
    removed = await cascade.delete_own_movie(store, user, movie_id)
    return {"deleted": movie_id, "requests_removed": removed}


@router.get("/users")
async def admin_users(user: User = Depends(require_admin), store: Store = Depends(get_store)):
    return {"items": [user_out(u) for u in await store.get_users()]}


@router.get("/settings")
async def admin_settings(user: User = Depends(require_admin), store: Store = Depends(get_store)):
    return (await store.get_app_settings()).to_document()


@router.put("/settings")
async def admin_update_settings(
    body: SettingsUpdate,
    user: User = Depends(require_admin),
    store: Store = Depends(get_store),
):
    settings = await store.update_app_settings(AppSettings(earn_link=body.earn_link))
    await store.audit(user.id, "settings_updated", "settings", settings.id, {"earn_link": settings.earn_link})
    return settings.to_document()


@router.post("/maintenance/purge-orphans")
async def admin_purge_orphans(user: User = Depends(require_admin), store: Store = Depends(get_store)):
    """Remove moderation requests left behind by movies deleted outside the cascade."""
    removed = await cascade.purge_orphaned_requests(store.adapter)
    return {"removed": removed}
