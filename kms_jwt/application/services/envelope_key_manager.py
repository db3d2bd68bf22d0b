"""
Application service: mediates every interaction between the token lifecycle
and the key-management service / plaintext key cache.

Business decisions owned here:
  - Which key spec data keys are generated with (EnvelopeProtocol.key_spec).
  - How envelope headers are minted: aid from the caller, kid a fresh UUID v4,
    kct the standard-base64 ciphertext.
  - Which resolver strategy serves a verification (cache supplied or not).

The key-management port and the cache are injected; no boto3 or redis import
appears here.
"""

import logging
import uuid
from typing import Optional

from kms_jwt.application.services.key_resolvers import (
    CachedKeyResolver,
    DirectKeyResolver,
    KeyResolver,
    decode_key_ciphertext,
    encode_key_ciphertext,
)
from kms_jwt.domain.entities.envelope import (
    DEFAULT_PROTOCOL,
    DataKey,
    EnvelopeHeaders,
    EnvelopeProtocol,
)
from kms_jwt.domain.entities.token import Token
from kms_jwt.domain.exceptions import MalformedEnvelopeError
from kms_jwt.domain.ports.key_cache_port import IKeyCache
from kms_jwt.domain.ports.key_management_port import IKeyManagementService

logger = logging.getLogger(__name__)


class EnvelopeKeyManager:
    def __init__(
        self,
        kms: IKeyManagementService,
        protocol: EnvelopeProtocol = DEFAULT_PROTOCOL,
    ) -> None:
        self._kms = kms
        self._protocol = protocol
        self._direct = DirectKeyResolver(kms)

    @property
    def protocol(self) -> EnvelopeProtocol:
        return self._protocol

    def generate_envelope_key(self, master_key_id: str) -> DataKey:
        """Ask the key-management service for a fresh data key.

        The caller owns the returned plaintext and must drop it once signed.

        Raises:
            ValueError: if *master_key_id* is blank.
            KeyGenerationError: propagated from the key-management port.
        """
        if not master_key_id or not master_key_id.strip():
            raise ValueError("master_key_id must be a non-empty string")
        return self._kms.generate_data_key(master_key_id, self._protocol.key_spec)

    def build_envelope_headers(self, client_app_id: str, data_key: DataKey) -> EnvelopeHeaders:
        return EnvelopeHeaders(
            client_app_id=client_app_id,
            key_id=str(uuid.uuid4()),
            key_ciphertext=encode_key_ciphertext(data_key.ciphertext),
        )

    def read_envelope(self, token: Token) -> tuple[EnvelopeHeaders, int]:
        """Extract the envelope headers and the exp claim from a parsed token.

        Raises:
            MalformedEnvelopeError: if any of aid/kid/kct is missing or not a
                non-empty string, if kct is not base64, or if exp is not an integer.
        """
        values = {}
        for name in self._protocol.header_names:
            value = token.get_protected_header(name)
            if not isinstance(value, str) or not value:
                raise MalformedEnvelopeError(f"Token missing envelope header {name!r}")
            values[name] = value

        expires_at = token.get_claim("exp")
        if isinstance(expires_at, bool) or not isinstance(expires_at, int):
            raise MalformedEnvelopeError("Token missing integer 'exp' claim")

        envelope = EnvelopeHeaders(
            client_app_id=values[self._protocol.app_id_header],
            key_id=values[self._protocol.key_id_header],
            key_ciphertext=values[self._protocol.key_ciphertext_header],
        )
        decode_key_ciphertext(envelope.key_ciphertext)
        return envelope, expires_at

    def resolver_for(self, cache: Optional[IKeyCache]) -> KeyResolver:
        if cache is None:
            return self._direct
        return CachedKeyResolver(self._direct, cache, self._protocol)

    def resolve_plaintext_key(self, token: Token, cache: Optional[IKeyCache] = None) -> bytes:
        """Return the plaintext data key that signed *token*.

        Without a cache every call is a key-management round trip. With a cache,
        a hit costs no round trip and a miss stores the key until the token's exp.

        Raises:
            MalformedEnvelopeError: if the envelope headers or exp are invalid.
            KeyDecryptionError: if the key-management service cannot unwrap kct.
            KeyCacheError: if the cache backend fails.
        """
        envelope, expires_at = self.read_envelope(token)
        return self.resolver_for(cache).resolve(envelope, expires_at)
