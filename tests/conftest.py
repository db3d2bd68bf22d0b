"""
Pytest configuration and shared fixtures.
"""

import pytest

from kms_jwt.application.services.envelope_key_manager import EnvelopeKeyManager
from kms_jwt.application.services.token_with_envelope import TokenWithEnvelope
from kms_jwt.infrastructure.cache.memory_cache import InMemoryKeyCache
from kms_jwt.infrastructure.token.jose_token_core import JoseTokenCore
from tests.fakes import FakeKeyManagementService


class FrozenClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def kms():
    return FakeKeyManagementService()


@pytest.fixture
def token_core():
    return JoseTokenCore()


@pytest.fixture
def key_manager(kms):
    return EnvelopeKeyManager(kms)


@pytest.fixture
def service(token_core, key_manager):
    return TokenWithEnvelope(token_core, key_manager)


@pytest.fixture
def clock():
    return FrozenClock(1500)


@pytest.fixture
def cache(clock):
    return InMemoryKeyCache(clock=clock)


@pytest.fixture
def issue(service):
    """Issue a token with sensible defaults; keyword arguments override them."""

    def _issue(**overrides):
        params = {
            "master_key_id": "master-1",
            "client_app_id": "app-42",
            "audience": ["svc-a"],
            "subject": "user-7",
            "issued_at": 1000,
            "expires_at": 2000,
            "custom_claims": {},
            "signing_key_id": "sign-1",
        }
        params.update(overrides)
        return service.issue_token(**params)

    return _issue
