"""Store facade: identity, filtering, scrubbing and read-path fallbacks."""

import pytest

from catalog.core.exceptions import (
    AlreadyExistsError,
    AuthFailedError,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    PersistenceFailedError,
)
from catalog.models.app_settings import AppSettings
from catalog.models.movie import Movie
from catalog.models.status import ReviewStatus
from catalog.models.user import Role, User
from catalog.services.credits import ADMIN_CREDITS

pytestmark = pytest.mark.asyncio


async def test_register_seeds_credits_by_role(store):
    creator = await store.register("Ana", "ana@example.com", "secret-1", Role.CREATOR)
    viewer = await store.register("Bo", "bo@example.com", "secret-2", Role.VIEWER)
    assert creator.credits == 10
    assert viewer.credits == 0
    assert (await store.get_user(creator.id)).role == Role.CREATOR


async def test_register_rejects_admin_and_duplicates(store, creator):
    with pytest.raises(BadRequestError):
        await store.register("Eve", "eve@example.com", "secret", Role.ADMIN)
    with pytest.raises(AlreadyExistsError):
        await store.register("Ana 2", "ANA@example.com", "other", Role.VIEWER)


async def test_login(store, creator):
    user = await store.login("ana@example.com", "ana-password")
    assert user.id == creator.id
    with pytest.raises(AuthFailedError):
        await store.login("ana@example.com", "wrong")
    with pytest.raises(AuthFailedError):
        await store.login("nobody@example.com", "ana-password")


async def test_login_without_profile_is_not_found(store):
    await store.identity.create_account("ghost@example.com", "pw-ghost")
    with pytest.raises(NotFoundError):
        await store.login("ghost@example.com", "pw-ghost")


async def test_login_as_admin_provisions_once(store, settings):
    first = await store.login_as_admin()
    second = await store.login_as_admin()
    assert first.id == second.id
    assert second.role == Role.ADMIN
    assert second.credits == ADMIN_CREDITS
    admins = [u for u in await store.get_users() if u.role == Role.ADMIN]
    assert len(admins) == 1
    assert admins[0].email == settings.admin_email


async def test_login_as_admin_restores_role(store):
    admin = await store.login_as_admin()
    await store.adapter.patch("users", admin.id, {"role": "viewer", "credits": 0})
    again = await store.login_as_admin()
    assert again.role == Role.ADMIN
    assert (await store.get_user(admin.id)).credits == ADMIN_CREDITS


async def test_login_as_admin_fails_when_email_taken(store, settings):
    await store.identity.create_account(settings.admin_email, "someone-elses-password")
    with pytest.raises(AuthFailedError):
        await store.login_as_admin()


async def test_identity_listener_reports_changes(store):
    seen = []
    await store.init_identity_listener(seen.append)
    user = await store.register("Ana", "ana@example.com", "ana-password", Role.CREATOR)
    await store.logout()
    assert seen[0] is None
    assert seen[1].id == user.id
    assert seen[1].role == Role.CREATOR
    assert seen[-1] is None


async def test_identity_listener_accepts_coroutines(store):
    seen = []

    async def callback(user):
        seen.append(user)

    await store.init_identity_listener(callback)
    await store.login_as_admin()
    assert seen[-1].role == Role.ADMIN


async def test_missing_profile_is_self_healed(store):
    identity = await store.identity.create_account("oob@example.com", "pw-oob", "Out Of Band")
    seen = []
    await store.init_identity_listener(seen.append)
    await store.identity.activate(identity)

    healed = seen[-1]
    assert healed.id == identity.uid
    assert healed.role == Role.VIEWER
    assert healed.credits == 0
    assert await store.get_user(identity.uid) is not None
    assert (await store.current_user()).id == identity.uid


async def test_get_movies_hides_retired_titles(store):
    await store.add_movie(Movie(id="m1", creator_id="u", title="School Fire Story", release_year=2020))
    await store.add_movie(Movie(id="m2", creator_id="u", title="Dune", release_year=2021))
    assert [m.id for m in await store.get_movies()] == ["m2"]
    # hidden, not deleted
    assert await store.adapter.get("movies", "m1") is not None


async def test_update_movie_requires_existing(store):
    with pytest.raises(NotFoundError):
        await store.update_movie(Movie(id="nope", creator_id="u", title="X", release_year=2020))


async def test_update_user_scrubs_password(store, creator):
    await store.update_user(creator.model_copy(update={"name": "Ana B", "password": "plaintext"}))
    raw = await store.adapter.get("users", creator.id)
    assert "password" not in raw
    assert raw["name"] == "Ana B"


async def test_update_user_cannot_grant_admin(store, creator):
    with pytest.raises(ForbiddenError):
        await store.update_user(creator.model_copy(update={"role": Role.ADMIN}))
    with pytest.raises(NotFoundError):
        await store.update_user(User(id="usr_missing", name="X"))


async def test_transact_scrubs_password(store, creator):
    from catalog.storage.base import WriteOp

    doc = {**creator.to_document(), "password": "plaintext"}
    await store.transact([WriteOp.put("users", creator.id, doc)])
    assert "password" not in await store.adapter.get("users", creator.id)


async def test_categories_default_and_fallback(store, monkeypatch):
    categories = await store.get_categories()
    assert [c.name for c in categories] == ["Action", "Sci-Fi", "Drama", "Comedy", "Horror"]

    async def broken(collection):
        raise PersistenceFailedError("offline")

    monkeypatch.setattr(store.adapter, "list", broken)
    assert len(await store.get_categories()) == 5


async def test_categories_empty_collection_uses_defaults(store):
    for c in await store.get_categories():
        await store.adapter.delete("categories", c.id)
    assert len(await store.get_categories()) == 5


async def test_app_settings_lazy_default_and_replace(store, settings):
    await store.adapter.delete("settings", "global")
    current = await store.get_app_settings()
    assert current.earn_link == settings.default_earn_link
    assert await store.adapter.get("settings", "global") is not None

    updated = await store.update_app_settings(AppSettings(id="other", earn_link="https://ads.example.com"))
    assert updated.id == "global"
    assert (await store.get_app_settings()).earn_link == "https://ads.example.com"
    assert len(await store.adapter.list("settings")) == 1


async def test_app_settings_fallback(store, settings, monkeypatch):
    async def broken(collection, id):
        raise PersistenceFailedError("offline")

    monkeypatch.setattr(store.adapter, "get", broken)
    assert (await store.get_app_settings()).earn_link == settings.default_earn_link


async def test_write_paths_do_not_degrade(store, monkeypatch):
    async def broken(*args, **kwargs):
        raise PersistenceFailedError("offline")

    monkeypatch.setattr(store.adapter, "put", broken)
    with pytest.raises(PersistenceFailedError):
        await store.update_app_settings(AppSettings(earn_link="https://x.example.com"))
    with pytest.raises(PersistenceFailedError):
        await store.add_movie(Movie(id="m1", creator_id="u", title="A", release_year=2020, status=ReviewStatus.PENDING))


async def test_login_without_activation_keeps_current_identity(store, creator):
    await store.logout()
    user = await store.login("ana@example.com", "ana-password", activate=False)
    assert user.id == creator.id
    assert store.identity.current is None
    assert await store.current_user() is None
