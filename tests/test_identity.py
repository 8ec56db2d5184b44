"""Credential-backed identity provider."""

import pytest

from catalog.core.exceptions import AlreadyExistsError, AuthFailedError

pytestmark = pytest.mark.asyncio


async def test_create_and_verify(store):
    provider = store.identity
    identity = await provider.create_account("Ana@Example.com", "pw-123456", "Ana")
    assert identity.email == "ana@example.com"
    assert provider.current is None

    verified = await provider.verify("ana@example.com", "pw-123456")
    assert verified.uid == identity.uid


async def test_password_is_hashed(store):
    identity = await store.identity.create_account("ana@example.com", "pw-123456")
    doc = await store.adapter.get("credentials", identity.uid)
    assert doc["password_hash"] != "pw-123456"
    assert "password" not in doc


async def test_duplicate_and_bad_input(store):
    provider = store.identity
    await provider.create_account("ana@example.com", "pw-123456")
    with pytest.raises(AlreadyExistsError):
        await provider.create_account("ana@example.com", "another")
    with pytest.raises(AuthFailedError):
        await provider.create_account("not-an-email", "pw")
    with pytest.raises(AuthFailedError):
        await provider.verify("ana@example.com", "")


async def test_sign_in_and_out_notify(store):
    provider = store.identity
    await provider.create_account("ana@example.com", "pw-123456")
    events = []

    async def listener(identity):
        events.append(identity.email if identity else None)

    provider.subscribe(listener)
    await provider.sign_in("ana@example.com", "pw-123456")
    await provider.sign_out()
    assert events == ["ana@example.com", None]
