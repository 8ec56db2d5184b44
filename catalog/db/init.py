from catalog.core.config import Settings, get_settings
from catalog.core.logging import get_logger
from catalog.services.identity import CredentialIdentityProvider
from catalog.services.store import Store
from catalog.storage.base import select_adapter

log = get_logger(__name__)


def init_store(settings: Settings | None = None) -> Store:
    """Build the process-wide Store: one adapter, chosen once, injected everywhere."""
    settings = settings or get_settings()
    adapter = select_adapter(settings)
    store = Store(adapter, CredentialIdentityProvider(adapter), settings)
    log.info("store_ready", backend=adapter.name)
    return store
