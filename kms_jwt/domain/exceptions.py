"""
Domain error taxonomy for envelope-protected tokens.
Zero external dependencies.

Each class maps to a different remediation:
  - KeyGenerationError / KeyDecryptionError / KeyCacheError: infrastructure outage.
  - InvalidSignatureError: security event (tampering or wrong signing key).
  - MalformedEnvelopeError / MalformedTokenError / ClaimConflictError: client bug.
"""


class EnvelopeTokenError(Exception):
    """Base exception for envelope token errors."""
    pass


class KeyGenerationError(EnvelopeTokenError):
    """The key-management service failed to produce a data key."""
    pass


class KeyDecryptionError(EnvelopeTokenError):
    """The key-management service failed to decrypt a data key ciphertext."""
    pass


class KeyCacheError(EnvelopeTokenError):
    """The plaintext key cache backend failed."""
    pass


class MalformedEnvelopeError(EnvelopeTokenError):
    """Envelope headers or the exp claim are missing or invalid."""
    pass


class MalformedTokenError(EnvelopeTokenError):
    """Token could not be parsed."""
    pass


class InvalidSignatureError(EnvelopeTokenError):
    """Token signature does not match the resolved data key."""
    pass


class ClaimConflictError(EnvelopeTokenError):
    """A custom claim collides with a standard claim name."""
    pass
