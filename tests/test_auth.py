import asyncio

import pytest

from memora.errors import AuthenticationError
from memora.services import LocalIdentityProvider, User


def test_local_provider_defaults_to_signed_in():
    provider = LocalIdentityProvider(User(id="u1", email="a@example.com"))
    user = asyncio.run(provider.current_user())
    assert user.id == "u1"
    assert user.label == "a@example.com"


def test_signed_out_provider_raises():
    provider = LocalIdentityProvider(signed_in=False)
    with pytest.raises(AuthenticationError) as excinfo:
        asyncio.run(provider.current_user())
    assert excinfo.value.description == "Please sign in to start learning"


def test_auth_change_delivers_snapshot_and_updates():
    provider = LocalIdentityProvider(User(id="u1", email="a@example.com", display_name="Ana"), signed_in=False)
    states = []
    unsubscribe = provider.on_auth_change(states.append)

    asyncio.run(provider.login())
    asyncio.run(provider.logout())
    unsubscribe()
    asyncio.run(provider.login())

    assert [s.user.label if s.user else None for s in states] == [None, "Ana", None]
    assert all(not s.is_loading for s in states)
