"""
Domain entity for a parsed or freshly signed token.
Zero external dependencies.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Token:
    """Protected headers and claims of a compact JWS, frozen after signing.

    headers and claims are wrapped in read-only mapping proxies so a verified
    token cannot be altered after the fact.
    """

    headers: Mapping[str, Any]
    claims: Mapping[str, Any]
    signature: str
    compact: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    def get_protected_header(self, name: str) -> Optional[Any]:
        return self.headers.get(name)

    def get_claim(self, name: str) -> Optional[Any]:
        return self.claims.get(name)
