"""Cascade delete: a movie and the moderation requests pointing at it go together."""

from typing import TYPE_CHECKING

from catalog.core.exceptions import ForbiddenError, NotFoundError
from catalog.core.logging import get_logger
from catalog.models.moderation_request import ModerationRequest, RequestAction
from catalog.models.movie import Movie
from catalog.models.user import User
from catalog.services import credits as ledger
from catalog.storage.base import BackendAdapter, WriteOp

if TYPE_CHECKING:
    from catalog.services.store import Store

log = get_logger(__name__)


async def build_delete_ops(adapter: BackendAdapter, movie_id: str) -> list[WriteOp]:
    requests = await adapter.list(ModerationRequest.collection)
    ops = [WriteOp.delete(Movie.collection, movie_id)]
    ops += [
        WriteOp.delete(ModerationRequest.collection, r["id"])
        for r in requests
        if r.get("movie_id") == movie_id
    ]
    return ops


async def delete_movie(adapter: BackendAdapter, movie_id: str) -> int:
    """Delete the movie and its requests atomically; return how many requests went with it."""
    ops = await build_delete_ops(adapter, movie_id)
    await adapter.transact(ops)
    removed = len(ops) - 1
    log.info("movie_deleted", movie_id=movie_id, requests_removed=removed)
    return removed


async def delete_own_movie(store: "Store", user: User, movie_id: str) -> int:
    """Creator or admin deletion. Creators pay the delete cost in the same transaction."""
    movie = await store.get_movie(movie_id)
    if movie is None:
        raise NotFoundError("Movie not found")
    if not user.is_admin and movie.creator_id != user.id:
        raise ForbiddenError("Not your movie")

    ops = await build_delete_ops(store.adapter, movie_id)
    if not user.is_admin:
        stored = await store.get_user(user.id)
        if stored is None:
            raise NotFoundError("User not found")
        charged = ledger.debit(stored, ledger.cost_of(RequestAction.DELETE))
        ops.insert(0, WriteOp.put(User.collection, charged.id, charged.to_document()))
    await store.transact(ops)

    removed = sum(1 for op in ops if op.collection == ModerationRequest.collection)
    log.info("movie_deleted", movie_id=movie_id, by=user.id, requests_removed=removed)
    await store.audit(user.id, "movie_deleted", "movie", movie_id, {"title": movie.title, "requests_removed": removed})
    return removed


async def purge_orphaned_requests(adapter: BackendAdapter) -> int:
    """Remove requests whose movie no longer exists."""
    movie_ids = {m["id"] for m in await adapter.list(Movie.collection)}
    orphaned = {
        r.get("movie_id")
        for r in await adapter.list(ModerationRequest.collection)
        if r.get("movie_id") not in movie_ids
    }
    removed = 0
    for movie_id in orphaned:
        removed += await adapter.delete_where(ModerationRequest.collection, "movie_id", movie_id)
    if removed:
        log.info("orphaned_requests_purged", count=removed)
    return removed
