"""Identity providers: who is signed in, independent of their catalog profile."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Awaitable, Callable

from catalog.core.exceptions import AlreadyExistsError, AuthFailedError
from catalog.core.logging import get_logger
from catalog.core.security import hash_password, verify_password
from catalog.models.base import new_id
from catalog.models.identity import AuthIdentity
from catalog.storage.base import BackendAdapter

log = get_logger(__name__)

IdentityListener = Callable[[AuthIdentity | None], Awaitable[None]]

CREDENTIALS = "credentials"


class IdentityProvider(ABC):
    def __init__(self) -> None:
        self._current: AuthIdentity | None = None
        self._listeners: list[IdentityListener] = []

    @property
    def current(self) -> AuthIdentity | None:
        return self._current

    def subscribe(self, listener: IdentityListener) -> None:
        self._listeners.append(listener)

    async def activate(self, identity: AuthIdentity | None) -> None:
        """Make ``identity`` current and notify every listener."""
        self._current = identity
        for listener in list(self._listeners):
            await listener(identity)

    async def sign_out(self) -> None:
        await self.activate(None)

    @abstractmethod
    async def verify(self, email: str, password: str) -> AuthIdentity:
        """Check credentials; raise AuthFailedError on mismatch."""
        ...

    @abstractmethod
    async def create_account(self, email: str, password: str, display_name: str = "") -> AuthIdentity:
        """Create credentials without signing in; AlreadyExistsError on duplicate email."""
        ...

    async def sign_in(self, email: str, password: str) -> AuthIdentity:
        identity = await self.verify(email, password)
        await self.activate(identity)
        return identity


class CredentialIdentityProvider(IdentityProvider):
    """Keeps hashed credentials in a ``credentials`` collection of the active store."""

    def __init__(self, adapter: BackendAdapter) -> None:
        super().__init__()
        self._adapter = adapter

    async def _find_by_email(self, email: str) -> dict | None:
        email = email.strip().lower()
        for doc in await self._adapter.list(CREDENTIALS):
            if doc.get("email") == email:
                return doc
        return None

    async def verify(self, email: str, password: str) -> AuthIdentity:
        doc = await self._find_by_email(email)
        if not doc or not verify_password(password or "", doc.get("password_hash", "")):
            log.info("auth_failed", email=email.strip().lower())
            raise AuthFailedError("Invalid email or password")
        return AuthIdentity(uid=doc["id"], email=doc["email"], display_name=doc.get("display_name", ""))

    async def create_account(self, email: str, password: str, display_name: str = "") -> AuthIdentity:
        email = email.strip().lower()
        if not email or "@" not in email:
            raise AuthFailedError("Invalid email")
        if not password:
            raise AuthFailedError("Password required")
        if await self._find_by_email(email):
            raise AlreadyExistsError("Email already registered", details={"email": email})
        uid = new_id("usr")
        await self._adapter.put(
            CREDENTIALS,
            uid,
            {
                "email": email,
                "password_hash": hash_password(password),
                "display_name": display_name,
                "created_at": datetime.utcnow().isoformat(),
            },
        )
        log.info("account_created", uid=uid, email=email)
        return AuthIdentity(uid=uid, email=email, display_name=display_name)
