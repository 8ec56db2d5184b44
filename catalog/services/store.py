"""Store facade: the single entry point the rest of the application talks to.

Wraps one ``BackendAdapter`` (chosen at boot) and an ``IdentityProvider``
and exposes entity-level operations. On top of plain CRUD it resolves
identities into profiles, hides retired seed records from movie listings and
keeps credential fields out of every user write.
"""

import inspect
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable

from catalog.core.audit import log_event
from catalog.core.config import Settings
from catalog.core.exceptions import (
    AlreadyExistsError,
    AppError,
    AuthFailedError,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    PersistenceFailedError,
)
from catalog.core.logging import get_logger
from catalog.db.seeds import default_app_settings
from catalog.models.app_settings import SETTINGS_ID, AppSettings
from catalog.models.category import DEFAULT_CATEGORIES, Category
from catalog.models.identity import AuthIdentity
from catalog.models.moderation_request import ModerationRequest
from catalog.models.movie import Movie
from catalog.models.user import Role, User
from catalog.services import cascade
from catalog.services.credits import ADMIN_CREDITS, CREATOR_SIGNUP_CREDITS
from catalog.services.identity import IdentityProvider
from catalog.storage.base import BackendAdapter, Document, WriteOp

log = get_logger(__name__)

# Stale seed records that must never reach a listing again.
RETIRED_TITLES = frozenset({"School Fire Story"})

CREDENTIAL_FIELDS = ("password",)

IdentityCallback = Callable[[User | None], Awaitable[None] | None]


def scrub_credentials(doc: Document) -> Document:
    return {k: v for k, v in doc.items() if k not in CREDENTIAL_FIELDS}


class Store:
    def __init__(self, adapter: BackendAdapter, identity: IdentityProvider, settings: Settings) -> None:
        self._adapter = adapter
        self._identity = identity
        self._settings = settings

    @property
    def adapter(self) -> BackendAdapter:
        return self._adapter

    @property
    def identity(self) -> IdentityProvider:
        return self._identity

    @property
    def settings(self) -> Settings:
        return self._settings

    async def close(self) -> None:
        await self._adapter.close()

    # --- identity ---

    async def _resolve_identity(self, identity: AuthIdentity) -> User:
        """Return the profile for ``identity``, creating a Viewer profile if none exists."""
        doc = await self._adapter.get(User.collection, identity.uid)
        if doc is not None:
            return User.from_document(scrub_credentials(doc))
        user = User(
            id=identity.uid,
            name=identity.display_name or "User",
            email=identity.email,
            role=Role.VIEWER,
            credits=0,
        )
        await self._adapter.put(User.collection, user.id, scrub_credentials(user.to_document()))
        log.info("profile_self_healed", user_id=user.id)
        return user

    async def init_identity_listener(self, callback: IdentityCallback) -> None:
        """Call ``callback`` with the current user now and after every identity change."""

        async def listener(identity: AuthIdentity | None) -> None:
            user = None
            if identity is not None:
                try:
                    user = await self._resolve_identity(identity)
                except AppError as e:
                    log.error("identity_resolution_failed", uid=identity.uid, error=e.message)
            result = callback(user)
            if inspect.isawaitable(result):
                await result

        self._identity.subscribe(listener)
        await listener(self._identity.current)

    async def current_user(self) -> User | None:
        identity = self._identity.current
        if identity is None:
            return None
        return await self._resolve_identity(identity)

    async def login(self, email: str, password: str, activate: bool = True) -> User:
        """Verify credentials and return the profile.

        With ``activate`` the identity also becomes the provider's current one,
        which is meant for a single-client process. Request handlers that keep
        their own session pass ``activate=False``.
        """
        identity = await self._identity.verify(email, password)
        user = await self.get_user(identity.uid)
        if user is None:
            raise NotFoundError("Profile not found")
        if activate:
            await self._identity.activate(identity)
        log.info("user_login", user_id=user.id, role=user.role.value)
        return user

    async def login_as_admin(self, activate: bool = True) -> User:
        """Sign in as the reserved admin identity, provisioning it if needed.

        This is the only path that creates or promotes an Admin profile.
        """
        email = self._settings.admin_email
        password = self._settings.admin_password
        try:
            identity = await self._identity.verify(email, password)
        except AuthFailedError:
            log.warning("admin_login_failed", msg="attempting provisioning")
            try:
                identity = await self._identity.create_account(email, password, self._settings.admin_name)
            except AlreadyExistsError as e:
                raise AuthFailedError("Admin auto-provisioning failed") from e

        existing = await self.get_user(identity.uid)
        admin = User(
            id=identity.uid,
            name=self._settings.admin_name,
            email=identity.email,
            role=Role.ADMIN,
            credits=ADMIN_CREDITS,
            avatar_url=existing.avatar_url if existing else None,
            created_at=existing.created_at if existing else datetime.utcnow(),
        )
        await self._adapter.put(User.collection, admin.id, scrub_credentials(admin.to_document()))
        await log_event(self._adapter, admin.id, "admin_login", "user", admin.id, {"provisioned": existing is None})
        if activate:
            await self._identity.activate(identity)
        return admin

    async def register(
        self, name: str, email: str, password: str, role: Role = Role.VIEWER, activate: bool = True
    ) -> User:
        role = Role(role)
        if role == Role.ADMIN:
            raise BadRequestError("Cannot self-register as admin")
        identity = await self._identity.create_account(email, password, name)
        user = User(
            id=identity.uid,
            name=name,
            email=identity.email,
            role=role,
            credits=CREATOR_SIGNUP_CREDITS if role == Role.CREATOR else 0,
        )
        await self._adapter.put(User.collection, user.id, scrub_credentials(user.to_document()))
        log.info("user_created", user_id=user.id, role=role.value)
        if activate:
            await self._identity.activate(identity)
        return user

    async def logout(self) -> None:
        await self._identity.sign_out()

    # --- movies ---

    async def get_movies(self) -> list[Movie]:
        docs = await self._adapter.list(Movie.collection)
        movies = [Movie.from_document(d) for d in docs]
        return [m for m in movies if m.title not in RETIRED_TITLES]

    async def get_movie(self, id: str) -> Movie | None:
        doc = await self._adapter.get(Movie.collection, id)
        return Movie.from_document(doc) if doc else None

    async def add_movie(self, movie: Movie) -> Movie:
        await self._adapter.put(Movie.collection, movie.id, movie.to_document())
        return movie

    async def update_movie(self, movie: Movie) -> Movie:
        """Merge field changes into the stored movie. Status is owned by moderation and kept as stored."""
        changes = movie.to_document()
        changes.pop("status", None)
        await self._adapter.patch(Movie.collection, movie.id, changes)
        stored = await self.get_movie(movie.id)
        return stored if stored is not None else movie

    async def delete_movie(self, id: str) -> int:
        """Delete the movie and every request referencing it in one transaction."""
        return await cascade.delete_movie(self._adapter, id)

    # --- reference data ---

    async def get_categories(self) -> list[Category]:
        try:
            docs = await self._adapter.list(Category.collection)
        except PersistenceFailedError as e:
            log.warning("categories_fallback", error=e.message)
            return [c.model_copy() for c in DEFAULT_CATEGORIES]
        if not docs:
            return [c.model_copy() for c in DEFAULT_CATEGORIES]
        return [Category.from_document(d) for d in docs]

    # --- users ---

    async def get_users(self) -> list[User]:
        docs = await self._adapter.list(User.collection)
        return [User.from_document(scrub_credentials(d)) for d in docs]

    async def get_user(self, id: str) -> User | None:
        doc = await self._adapter.get(User.collection, id)
        return User.from_document(scrub_credentials(doc)) if doc else None

    async def update_user(self, user: User) -> User:
        stored = await self.get_user(user.id)
        if stored is None:
            raise NotFoundError("User not found")
        if user.role == Role.ADMIN and stored.role != Role.ADMIN:
            raise ForbiddenError("Admin role is granted only through admin login")
        doc = scrub_credentials(user.to_document())
        await self._adapter.patch(User.collection, user.id, doc)
        return User.from_document(doc)

    # --- moderation requests ---

    async def get_requests(self) -> list[ModerationRequest]:
        docs = await self._adapter.list(ModerationRequest.collection)
        return [ModerationRequest.from_document(d) for d in docs]

    async def get_request(self, id: str) -> ModerationRequest | None:
        doc = await self._adapter.get(ModerationRequest.collection, id)
        return ModerationRequest.from_document(doc) if doc else None

    async def add_request(self, request: ModerationRequest) -> ModerationRequest:
        await self._adapter.put(ModerationRequest.collection, request.id, request.to_document())
        return request

    async def update_request(self, request: ModerationRequest) -> ModerationRequest:
        await self._adapter.patch(ModerationRequest.collection, request.id, request.to_document())
        return request

    # --- settings ---

    async def get_app_settings(self) -> AppSettings:
        try:
            doc = await self._adapter.get(AppSettings.collection, SETTINGS_ID)
            if doc is not None:
                return AppSettings.from_document(doc)
            settings = default_app_settings(self._settings)
            await self._adapter.put(AppSettings.collection, SETTINGS_ID, settings.to_document())
            return settings
        except PersistenceFailedError as e:
            log.warning("settings_fallback", error=e.message)
            return default_app_settings(self._settings)

    async def update_app_settings(self, settings: AppSettings) -> AppSettings:
        settings = settings.model_copy(update={"id": SETTINGS_ID})
        await self._adapter.put(AppSettings.collection, SETTINGS_ID, settings.to_document())
        return settings

    # --- batches ---

    async def transact(self, ops: Iterable[WriteOp]) -> None:
        """Submit a write batch atomically, scrubbing credentials from user documents."""
        cleaned = []
        for op in ops:
            if op.kind == "put" and op.collection == User.collection:
                op = op.model_copy(update={"document": scrub_credentials(op.document or {})})
            cleaned.append(op)
        await self._adapter.transact(cleaned)

    async def audit(
        self,
        user_id: str | None,
        event_type: str,
        entity_type: str,
        entity_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        await log_event(self._adapter, user_id, event_type, entity_type, entity_id, metadata)
