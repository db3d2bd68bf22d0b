"""
Domain entities for the envelope-encryption protocol.
Zero external dependencies; pure Python dataclasses only.

EnvelopeProtocol is the single source of the wire-format constants (header
names, KMS key spec, cache-key prefix) shared by issuance and verification.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EnvelopeProtocol:
    app_id_header: str = "aid"
    key_id_header: str = "kid"
    key_ciphertext_header: str = "kct"
    key_spec: str = "AES_128"
    cache_key_prefix: str = "Jwt-Kms"

    @property
    def header_names(self) -> tuple[str, str, str]:
        return (self.app_id_header, self.key_id_header, self.key_ciphertext_header)

    def cache_key(self, client_app_id: str, key_id: str) -> str:
        return f"{self.cache_key_prefix}-{client_app_id}-{key_id}"


DEFAULT_PROTOCOL = EnvelopeProtocol()


@dataclass(frozen=True)
class DataKey:
    """A KMS data key. The plaintext is kept out of repr()."""

    plaintext: bytes = field(repr=False)
    ciphertext: bytes


@dataclass(frozen=True)
class EnvelopeHeaders:
    client_app_id: str
    key_id: str
    key_ciphertext: str

    def as_headers(self, protocol: EnvelopeProtocol = DEFAULT_PROTOCOL) -> dict[str, str]:
        return {
            protocol.app_id_header: self.client_app_id,
            protocol.key_id_header: self.key_id,
            protocol.key_ciphertext_header: self.key_ciphertext,
        }
