"""
Application service: public entry point tying the generic token layer to
envelope-encrypted signing keys.

Composition, not inheritance: an ITokenCore and an EnvelopeKeyManager are
injected, so the same token core can serve token variants without envelopes.
"""

from typing import Any, Mapping, Optional, Sequence

from kms_jwt.application.services.envelope_key_manager import EnvelopeKeyManager
from kms_jwt.application.use_cases.issue_token import IssueEnvelopeTokenUseCase
from kms_jwt.application.use_cases.parse_and_verify_token import (
    ParseAndVerifyEnvelopeTokenUseCase,
)
from kms_jwt.domain.entities.token import Token
from kms_jwt.domain.ports.key_cache_port import IKeyCache
from kms_jwt.domain.ports.key_management_port import IKeyManagementService
from kms_jwt.domain.ports.token_core_port import ITokenCore


class TokenWithEnvelope:
    def __init__(self, token_core: ITokenCore, key_manager: EnvelopeKeyManager) -> None:
        self._issue = IssueEnvelopeTokenUseCase(token_core, key_manager)
        self._verify = ParseAndVerifyEnvelopeTokenUseCase(token_core, key_manager)

    @classmethod
    def create(cls, token_core: ITokenCore, kms: IKeyManagementService) -> "TokenWithEnvelope":
        """Build the service with a default-protocol EnvelopeKeyManager over *kms*."""
        return cls(token_core, EnvelopeKeyManager(kms))

    def issue_token(
        self,
        master_key_id: str,
        client_app_id: str,
        audience: Sequence[str],
        subject: str,
        issued_at: int,
        expires_at: int,
        custom_claims: Optional[Mapping[str, Any]],
        signing_key_id: str,
    ) -> str:
        return self._issue.execute(
            master_key_id=master_key_id,
            client_app_id=client_app_id,
            audience=audience,
            subject=subject,
            issued_at=issued_at,
            expires_at=expires_at,
            custom_claims=custom_claims,
            signing_key_id=signing_key_id,
        )

    def parse_and_verify_token(
        self,
        serialized: str,
        signing_key_id: str,
        cache: Optional[IKeyCache] = None,
    ) -> Token:
        return self._verify.execute(serialized, signing_key_id, cache)
