"""
Application strategies: recover the plaintext data key of an envelope.

Two structurally separate paths so the uncached path can be audited on its own:
  - DirectKeyResolver: always unwraps the ciphertext through the key-management port.
  - CachedKeyResolver: consults an IKeyCache first and falls back to a
    DirectKeyResolver on a miss, storing the result until the token's exp.

No locking on the cached path: entries are addressed by (aid, kid), both
minted at issuance, and racing misses decrypt the same ciphertext to the
same value, so an overwrite is harmless.
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod

from kms_jwt.domain.entities.envelope import DEFAULT_PROTOCOL, EnvelopeHeaders, EnvelopeProtocol
from kms_jwt.domain.exceptions import MalformedEnvelopeError
from kms_jwt.domain.ports.key_cache_port import IKeyCache
from kms_jwt.domain.ports.key_management_port import IKeyManagementService

logger = logging.getLogger(__name__)


def encode_key_ciphertext(ciphertext: bytes) -> str:
    return base64.b64encode(ciphertext).decode("ascii")


def decode_key_ciphertext(encoded: str) -> bytes:
    """Decode the standard-base64 ``kct`` header value."""
    try:
        return base64.b64decode(encoded.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise MalformedEnvelopeError("Key ciphertext header is not valid base64") from exc


class KeyResolver(ABC):
    @abstractmethod
    def resolve(self, envelope: EnvelopeHeaders, expires_at: int) -> bytes:
        """Return the plaintext data key for *envelope*."""
        ...


class DirectKeyResolver(KeyResolver):
    """Unwraps every data key through the key-management service."""

    def __init__(self, kms: IKeyManagementService) -> None:
        self._kms = kms

    def resolve(self, envelope: EnvelopeHeaders, expires_at: int) -> bytes:
        ciphertext = decode_key_ciphertext(envelope.key_ciphertext)
        return self._kms.decrypt(ciphertext)


class CachedKeyResolver(KeyResolver):
    """Serves data keys from a cache, unwrapping and storing them on a miss."""

    def __init__(
        self,
        fallback: DirectKeyResolver,
        cache: IKeyCache,
        protocol: EnvelopeProtocol = DEFAULT_PROTOCOL,
    ) -> None:
        self._fallback = fallback
        self._cache = cache
        self._protocol = protocol

    def resolve(self, envelope: EnvelopeHeaders, expires_at: int) -> bytes:
        cache_key = self._protocol.cache_key(envelope.client_app_id, envelope.key_id)

        value, hit = self._cache.get(cache_key)
        if hit:
            logger.debug("Data key cache hit for %s", cache_key)
            return value

        logger.debug("Data key cache miss for %s", cache_key)
        plaintext = self._fallback.resolve(envelope, expires_at)
        # Absolute expiry: the entry never outlives the token.
        self._cache.set(cache_key, plaintext, expires_at)
        return plaintext
