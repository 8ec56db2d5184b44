"""Moderation workflow: upload submissions and admin decisions on them.

A request moves ``pending -> approved | rejected`` and never leaves a
terminal state. Deciding an upload request mirrors the decision onto the
movie it references, if that movie still exists.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from catalog.core.exceptions import ForbiddenError, NotFoundError
from catalog.core.logging import get_logger
from catalog.models.base import new_id
from catalog.models.moderation_request import ModerationRequest, RequestAction
from catalog.models.movie import Movie, MovieDraft
from catalog.models.status import ReviewStatus
from catalog.models.user import User
from catalog.services import credits as ledger
from catalog.storage.base import WriteOp

if TYPE_CHECKING:
    from catalog.services.store import Store

log = get_logger(__name__)

TRANSITIONS: dict[ReviewStatus, frozenset[ReviewStatus]] = {
    ReviewStatus.PENDING: frozenset({ReviewStatus.APPROVED, ReviewStatus.REJECTED}),
    ReviewStatus.APPROVED: frozenset(),
    ReviewStatus.REJECTED: frozenset(),
}


def can_transition(current: ReviewStatus, target: ReviewStatus) -> bool:
    if current.is_terminal:
        return False
    return target in TRANSITIONS[current]


async def submit_upload(store: "Store", creator_id: str, draft: MovieDraft) -> tuple[Movie, ModerationRequest]:
    """Charge the upload cost and create a pending movie plus its upload request.

    The debit, the movie and the request are written in one transaction, so a
    creator who cannot pay leaves no trace.
    """
    creator = await store.get_user(creator_id)
    if not creator:
        raise NotFoundError("User not found")
    if not (creator.is_creator or creator.is_admin):
        raise ForbiddenError("Only creators can upload")

    charged = ledger.debit(creator, ledger.cost_of(RequestAction.UPLOAD))

    categories = await store.get_categories()
    category_id = draft.category_id or (categories[0].id if categories else "")
    now = datetime.utcnow()
    movie = Movie(
        id=new_id("mov"),
        creator_id=creator.id,
        creator_name=creator.name,
        title=draft.title,
        description=draft.description,
        release_year=draft.release_year,
        watch_link=draft.watch_link,
        category_id=category_id,
        cover_image=draft.cover_image,
        backdrop_image=draft.backdrop_image,
        status=ReviewStatus.PENDING,
        views=0,
        created_at=now,
    )
    request = ModerationRequest(
        id=new_id("req"),
        creator_id=creator.id,
        creator_name=creator.name,
        movie_id=movie.id,
        movie_title=movie.title,
        action=RequestAction.UPLOAD,
        status=ReviewStatus.PENDING,
        timestamp=now,
    )
    await store.transact(
        [
            WriteOp.put(User.collection, charged.id, charged.to_document()),
            WriteOp.put(Movie.collection, movie.id, movie.to_document()),
            WriteOp.put(ModerationRequest.collection, request.id, request.to_document()),
        ]
    )
    log.info("movie_submitted", movie_id=movie.id, request_id=request.id, creator_id=creator.id, balance=charged.credits)
    await store.audit(creator.id, "movie_submitted", "movie", movie.id, {"request_id": request.id})
    return movie, request


async def resolve_request(store: "Store", request_id: str, approve: bool, actor: User) -> ModerationRequest:
    """Approve or reject a pending request. Repeating a decision changes nothing."""
    if not actor.is_admin:
        raise ForbiddenError("Admin only")
    request = await store.get_request(request_id)
    if request is None:
        raise NotFoundError("Request not found")

    target = ReviewStatus.APPROVED if approve else ReviewStatus.REJECTED
    if not can_transition(request.status, target):
        log.info("request_already_resolved", request_id=request_id, status=request.status.value)
        return request

    resolved = request.model_copy(update={"status": target})
    ops = [WriteOp.put(ModerationRequest.collection, resolved.id, resolved.to_document())]
    if request.action == RequestAction.UPLOAD:
        movie = await store.get_movie(request.movie_id)
        if movie is None:
            log.info("moderated_movie_missing", request_id=request_id, movie_id=request.movie_id)
        else:
            mirrored = movie.model_copy(update={"status": target})
            ops.append(WriteOp.put(Movie.collection, mirrored.id, mirrored.to_document()))
    await store.transact(ops)

    log.info("request_resolved", request_id=request_id, status=target.value, admin_id=actor.id)
    await store.audit(actor.id, f"request_{target.value}", "request", request_id, {"movie_id": request.movie_id})
    return resolved
