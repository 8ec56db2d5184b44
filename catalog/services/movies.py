"""Movie listings per audience, edits and view counting."""

from collections import defaultdict
from typing import TYPE_CHECKING, Iterable

from catalog.core.exceptions import ForbiddenError, NotFoundError
from catalog.core.logging import get_logger
from catalog.models.moderation_request import RequestAction
from catalog.models.movie import Movie, MovieChanges
from catalog.models.status import ReviewStatus
from catalog.models.user import User
from catalog.services import credits as ledger
from catalog.storage.base import WriteOp

if TYPE_CHECKING:
    from catalog.services.store import Store

log = get_logger(__name__)

RELATED_LIMIT = 4


def viewer_listing(movies: Iterable[Movie]) -> list[Movie]:
    return [m for m in movies if m.status == ReviewStatus.APPROVED]


def creator_listing(movies: Iterable[Movie], creator_id: str) -> list[Movie]:
    return [m for m in movies if m.creator_id == creator_id]


def admin_listing(movies: Iterable[Movie]) -> list[Movie]:
    return list(movies)


def related_movies(movies: Iterable[Movie], movie: Movie, limit: int = RELATED_LIMIT) -> list[Movie]:
    related = [
        m for m in viewer_listing(movies)
        if m.category_id == movie.category_id and m.id != movie.id
    ]
    return related[:limit]


def group_by_category(movies: Iterable[Movie]) -> dict[str, list[Movie]]:
    out: dict[str, list[Movie]] = defaultdict(list)
    for m in movies:
        out[m.category_id].append(m)
    return dict(out)


async def edit_movie(store: "Store", actor: User, movie_id: str, changes: MovieChanges) -> Movie:
    """Apply field edits. Admins edit for free; the owning creator pays the edit cost."""
    movie = await store.get_movie(movie_id)
    if movie is None:
        raise NotFoundError("Movie not found")
    if not actor.is_admin and movie.creator_id != actor.id:
        raise ForbiddenError("Not your movie")

    updated = movie.model_copy(update=changes.model_dump(exclude_none=True))
    if actor.is_admin:
        await store.update_movie(updated)
    else:
        stored = await store.get_user(actor.id)
        if stored is None:
            raise NotFoundError("User not found")
        charged = ledger.debit(stored, ledger.cost_of(RequestAction.EDIT))
        await store.transact(
            [
                WriteOp.put(User.collection, charged.id, charged.to_document()),
                WriteOp.put(Movie.collection, updated.id, updated.to_document()),
            ]
        )
    log.info("movie_edited", movie_id=movie_id, by=actor.id)
    return updated


async def record_view(store: "Store", movie_id: str) -> Movie:
    movie = await store.get_movie(movie_id)
    if movie is None:
        raise NotFoundError("Movie not found")
    viewed = movie.model_copy(update={"views": movie.views + 1})
    await store.update_movie(viewed)
    return viewed
