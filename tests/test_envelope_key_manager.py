"""
Tests for EnvelopeKeyManager and the key resolver strategies.
"""

import base64
import uuid

import pytest

from kms_jwt.application.services.key_resolvers import CachedKeyResolver, DirectKeyResolver
from kms_jwt.domain.entities.envelope import DEFAULT_PROTOCOL, DataKey
from kms_jwt.domain.entities.token import Token
from kms_jwt.domain.exceptions import (
    KeyDecryptionError,
    KeyGenerationError,
    MalformedEnvelopeError,
)


def _envelope_token(kms, key_manager, client_app_id="app-42", exp=2000, **header_overrides):
    """Build a parsed token carrying a real envelope minted by *kms*."""
    data_key = key_manager.generate_envelope_key("master-1")
    headers = {"alg": "HS256", "typ": "JWT"}
    headers.update(key_manager.build_envelope_headers(client_app_id, data_key).as_headers())
    headers.update(header_overrides)
    claims = {"aud": ["svc-a"], "sub": "user-7", "iat": 1000}
    if exp is not None:
        claims["exp"] = exp
    return Token(headers=headers, claims=claims, signature="", compact=""), data_key


class TestGenerateEnvelopeKey:
    def test_requests_aes_128_data_key(self, kms, key_manager):
        data_key = key_manager.generate_envelope_key("master-1")

        assert kms.generate_calls == [("master-1", "AES_128")]
        assert len(data_key.plaintext) == 16

    def test_blank_master_key_id_rejected(self, kms, key_manager):
        with pytest.raises(ValueError):
            key_manager.generate_envelope_key("  ")
        assert kms.generate_calls == []

    def test_unknown_master_key_raises_key_generation_error(self, key_manager):
        with pytest.raises(KeyGenerationError):
            key_manager.generate_envelope_key("master-unknown")

    def test_plaintext_hidden_from_repr(self):
        data_key = DataKey(plaintext=b"secret-material!", ciphertext=b"\xff\xee")
        assert "secret-material" not in repr(data_key)


class TestBuildEnvelopeHeaders:
    def test_headers_carry_app_id_uuid4_and_base64_ciphertext(self, key_manager):
        data_key = DataKey(plaintext=bytes(range(16)), ciphertext=b"\xff\xee")

        envelope = key_manager.build_envelope_headers("app-42", data_key)
        headers = envelope.as_headers()

        assert headers["aid"] == "app-42"
        assert headers["kct"] == "/+4="
        assert uuid.UUID(headers["kid"]).version == 4

    def test_each_envelope_gets_a_new_kid(self, key_manager):
        data_key = DataKey(plaintext=bytes(16), ciphertext=b"\x01")
        kids = {key_manager.build_envelope_headers("app-42", data_key).key_id for _ in range(100)}
        assert len(kids) == 100


class TestReadEnvelope:
    @pytest.mark.parametrize("header", ["aid", "kid", "kct"])
    def test_missing_header_is_malformed_envelope(self, kms, key_manager, header):
        token, _ = _envelope_token(kms, key_manager)
        headers = dict(token.headers)
        del headers[header]
        token = Token(headers=headers, claims=token.claims, signature="", compact="")

        with pytest.raises(MalformedEnvelopeError, match=header):
            key_manager.read_envelope(token)

    @pytest.mark.parametrize("value", ["", 42, None])
    def test_non_string_or_empty_header_is_malformed_envelope(self, kms, key_manager, value):
        token, _ = _envelope_token(kms, key_manager, aid=value)
        with pytest.raises(MalformedEnvelopeError):
            key_manager.read_envelope(token)

    @pytest.mark.parametrize("exp", [None, "2000", 2000.5, True])
    def test_missing_or_non_integer_exp_is_malformed_envelope(self, kms, key_manager, exp):
        token, _ = _envelope_token(kms, key_manager, exp=exp)
        with pytest.raises(MalformedEnvelopeError):
            key_manager.read_envelope(token)

    def test_non_base64_ciphertext_is_malformed_envelope(self, kms, key_manager):
        token, _ = _envelope_token(kms, key_manager, kct="not base64!")
        with pytest.raises(MalformedEnvelopeError):
            key_manager.read_envelope(token)

    def test_returns_envelope_and_exp(self, kms, key_manager):
        token, data_key = _envelope_token(kms, key_manager)

        envelope, expires_at = key_manager.read_envelope(token)

        assert envelope.client_app_id == "app-42"
        assert base64.b64decode(envelope.key_ciphertext) == data_key.ciphertext
        assert expires_at == 2000


class TestResolvePlaintextKey:
    def test_without_cache_always_decrypts(self, kms, key_manager):
        token, data_key = _envelope_token(kms, key_manager)

        assert key_manager.resolve_plaintext_key(token) == data_key.plaintext
        assert key_manager.resolve_plaintext_key(token) == data_key.plaintext
        assert len(kms.decrypt_calls) == 2

    def test_resolver_strategy_follows_cache_presence(self, key_manager, cache):
        assert isinstance(key_manager.resolver_for(None), DirectKeyResolver)
        assert isinstance(key_manager.resolver_for(cache), CachedKeyResolver)

    def test_cache_miss_decrypts_and_stores_until_exp(self, kms, key_manager, cache):
        token, data_key = _envelope_token(kms, key_manager)
        cache_key = f"Jwt-Kms-app-42-{token.get_protected_header('kid')}"

        assert key_manager.resolve_plaintext_key(token, cache) == data_key.plaintext

        assert len(kms.decrypt_calls) == 1
        assert cache.get(cache_key) == (data_key.plaintext, True)
        assert cache.get_expiry(cache_key) == 2000

    def test_cache_hit_skips_kms(self, kms, key_manager, cache):
        token, data_key = _envelope_token(kms, key_manager)
        key_manager.resolve_plaintext_key(token, cache)

        assert key_manager.resolve_plaintext_key(token, cache) == data_key.plaintext
        assert len(kms.decrypt_calls) == 1

    def test_entry_valid_at_exp_and_not_after(self, kms, key_manager, cache, clock):
        token, _ = _envelope_token(kms, key_manager)
        key_manager.resolve_plaintext_key(token, cache)

        clock.now = 2000
        key_manager.resolve_plaintext_key(token, cache)
        assert len(kms.decrypt_calls) == 1

        clock.now = 2000.001
        key_manager.resolve_plaintext_key(token, cache)
        assert len(kms.decrypt_calls) == 2

    def test_cache_keys_are_namespaced_by_app(self, kms, key_manager, cache):
        first, _ = _envelope_token(kms, key_manager, client_app_id="app-1")
        second, _ = _envelope_token(kms, key_manager, client_app_id="app-2", kid=first.get_protected_header("kid"))

        key_manager.resolve_plaintext_key(first, cache)
        key_manager.resolve_plaintext_key(second, cache)

        assert len(kms.decrypt_calls) == 2
        assert len(cache) == 2

    def test_first_miss_for_shared_kid_fixes_entry_until_its_exp(self, kms, key_manager, cache, clock):
        genuine, genuine_key = _envelope_token(kms, key_manager, exp=2000)
        kid = genuine.get_protected_header("kid")
        other_key = key_manager.generate_envelope_key("master-1")
        impostor, _ = _envelope_token(
            kms,
            key_manager,
            exp=9000,
            kid=kid,
            kct=base64.b64encode(other_key.ciphertext).decode(),
        )

        assert key_manager.resolve_plaintext_key(impostor, cache) == other_key.plaintext
        assert key_manager.resolve_plaintext_key(genuine, cache) == other_key.plaintext
        assert cache.get_expiry(f"Jwt-Kms-app-42-{kid}") == 9000

        clock.now = 9001
        assert key_manager.resolve_plaintext_key(genuine, cache) == genuine_key.plaintext

    def test_decrypt_failure_propagates_and_caches_nothing(self, kms, key_manager, cache):
        token, _ = _envelope_token(kms, key_manager, kct=base64.b64encode(b"forged").decode())

        with pytest.raises(KeyDecryptionError):
            key_manager.resolve_plaintext_key(token, cache)
        assert len(cache) == 0

    def test_cache_key_format(self):
        assert DEFAULT_PROTOCOL.cache_key("app-42", "abc") == "Jwt-Kms-app-42-abc"
