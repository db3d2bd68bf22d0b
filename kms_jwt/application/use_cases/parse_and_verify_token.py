"""
Use-case: parse a compact envelope token and verify its signature.
Depends only on Domain ports/entities and the EnvelopeKeyManager service.
"""

import logging
from typing import Optional

from kms_jwt.application.services.envelope_key_manager import EnvelopeKeyManager
from kms_jwt.domain.entities.token import Token
from kms_jwt.domain.exceptions import InvalidSignatureError
from kms_jwt.domain.ports.key_cache_port import IKeyCache
from kms_jwt.domain.ports.token_core_port import ITokenCore

logger = logging.getLogger(__name__)


class ParseAndVerifyEnvelopeTokenUseCase:
    def __init__(self, token_core: ITokenCore, key_manager: EnvelopeKeyManager) -> None:
        self._token_core = token_core
        self._key_manager = key_manager

    def execute(
        self,
        serialized: str,
        signing_key_id: str,
        cache: Optional[IKeyCache] = None,
    ) -> Token:
        """Return the verified token: parse, resolve the data key, verify.

        Raises:
            MalformedTokenError: if *serialized* does not parse.
            MalformedEnvelopeError: if aid/kid/kct or exp are missing or invalid.
            KeyDecryptionError: if KMS cannot unwrap the data key.
            KeyCacheError: if the cache backend fails.
            InvalidSignatureError: if the signature does not match the resolved key.
        """
        token = self._token_core.parse_compact(serialized)
        plaintext = self._key_manager.resolve_plaintext_key(token, cache)
        verified = self._token_core.verify_signature(token, signing_key_id, plaintext)
        del plaintext

        if not verified:
            logger.warning(
                "Signature verification failed for aid=%s kid=%s",
                token.get_protected_header(self._key_manager.protocol.app_id_header),
                token.get_protected_header(self._key_manager.protocol.key_id_header),
            )
            raise InvalidSignatureError("Invalid token signature")
        return token
