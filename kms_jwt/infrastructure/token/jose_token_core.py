"""
Infrastructure adapter: python-jose JWS → ITokenCore.

Compact HS256 tokens. All python-jose details (jws/jwt helpers, key objects,
JOSEError hierarchy) are confined here; the application layer only sees Token
and the domain exceptions.

The HMAC secret is derived from the per-token data key and the signing key id
(HMAC-SHA256 keyed by the data key over the key id), so a token only verifies
under the signing key id it was issued with.
"""

import hashlib
import hmac
from typing import Any, Mapping

from jose import JOSEError, JWSError, jwk, jws, jwt
from jose.constants import ALGORITHMS

from kms_jwt.domain.entities.token import Token
from kms_jwt.domain.exceptions import MalformedTokenError
from kms_jwt.domain.ports.token_core_port import ITokenCore


class JoseTokenCore(ITokenCore):
    """Signs and verifies compact JWS tokens with a symmetric secret."""

    ALGORITHM = ALGORITHMS.HS256

    def parse_compact(self, serialized: str) -> Token:
        if not isinstance(serialized, str) or not serialized:
            raise MalformedTokenError("Token must be a non-empty string")
        try:
            headers = jws.get_unverified_header(serialized)
            claims = jwt.get_unverified_claims(serialized)
        except JOSEError as exc:
            raise MalformedTokenError(f"Token is malformed: {exc}") from exc

        return Token(
            headers=headers,
            claims=claims,
            signature=serialized.rsplit(".", 1)[1],
            compact=serialized,
        )

    def sign(
        self,
        headers: Mapping[str, Any],
        claims: Mapping[str, Any],
        secret: bytes,
        signing_key_id: str,
    ) -> str:
        return jws.sign(
            dict(claims),
            self._signing_key(secret, signing_key_id),
            headers=dict(headers),
            algorithm=self.ALGORITHM,
        )

    def verify_signature(self, token: Token, signing_key_id: str, secret: bytes) -> bool:
        try:
            jws.verify(
                token.compact,
                self._signing_key(secret, signing_key_id),
                algorithms=[self.ALGORITHM],
            )
        except JWSError:
            return False
        return True

    def _signing_key(self, secret: bytes, signing_key_id: str):
        derived = hmac.new(secret, signing_key_id.encode("utf-8"), hashlib.sha256).digest()
        return jwk.construct(derived, self.ALGORITHM)
