"""
Port (interface) for the generic token layer: compact serialization,
parsing and symmetric signatures. Knows nothing about envelope encryption.
Infrastructure adapters (e.g. JoseTokenCore) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from kms_jwt.domain.entities.token import Token


class ITokenCore(ABC):
    @abstractmethod
    def parse_compact(self, serialized: str) -> Token:
        """Split and decode a compact token without checking its signature.

        Raises:
            MalformedTokenError: if the input is not a structurally valid token.
        """
        ...

    @abstractmethod
    def sign(
        self,
        headers: Mapping[str, Any],
        claims: Mapping[str, Any],
        secret: bytes,
        signing_key_id: str,
    ) -> str:
        """Sign *claims* under the protected *headers* and return the compact form."""
        ...

    @abstractmethod
    def verify_signature(self, token: Token, signing_key_id: str, secret: bytes) -> bool:
        """Return True if *token* was signed with *secret* under *signing_key_id*."""
        ...
