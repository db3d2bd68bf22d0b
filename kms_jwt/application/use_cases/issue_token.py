"""
Use-case: issue a token signed with a freshly generated KMS data key.
Depends only on Domain ports/entities and the EnvelopeKeyManager service.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from kms_jwt.application.services.envelope_key_manager import EnvelopeKeyManager
from kms_jwt.domain.exceptions import ClaimConflictError
from kms_jwt.domain.ports.token_core_port import ITokenCore

logger = logging.getLogger(__name__)

STANDARD_CLAIMS = ("aud", "sub", "iat", "exp")


class IssueEnvelopeTokenUseCase:
    def __init__(self, token_core: ITokenCore, key_manager: EnvelopeKeyManager) -> None:
        self._token_core = token_core
        self._key_manager = key_manager

    def execute(
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
        """Issue a compact token protected by a per-token data key.

        Args:
            master_key_id:  KMS master key the data key is wrapped under.
            client_app_id:  Client application id, written to the ``aid`` header.
            audience:       ``aud`` claim (non-empty list of strings).
            subject:        ``sub`` claim.
            issued_at:      ``iat`` claim (Unix seconds).
            expires_at:     ``exp`` claim (Unix seconds), must be after *issued_at*.
            custom_claims:  Extra claims; must not use a standard claim name.
            signing_key_id: Name of the signing key.

        Raises:
            ValueError: on a precondition violation.
            ClaimConflictError: if a custom claim shadows aud, sub, iat or exp.
            KeyGenerationError: if KMS cannot generate the data key.
        """
        custom_claims = dict(custom_claims or {})
        self._check_request(client_app_id, audience, issued_at, expires_at, signing_key_id)
        conflicts = sorted(set(custom_claims).intersection(STANDARD_CLAIMS))
        if conflicts:
            raise ClaimConflictError(
                f"Custom claims may not override standard claims: {', '.join(conflicts)}"
            )

        data_key = self._key_manager.generate_envelope_key(master_key_id)
        envelope = self._key_manager.build_envelope_headers(client_app_id, data_key)

        claims = {
            "aud": list(audience),
            "sub": subject,
            "iat": issued_at,
            "exp": expires_at,
        }
        claims.update(custom_claims)

        token = self._token_core.sign(
            envelope.as_headers(self._key_manager.protocol),
            claims,
            data_key.plaintext,
            signing_key_id,
        )
        del data_key

        logger.info(
            "Issued envelope token aid=%s kid=%s sub=%s",
            envelope.client_app_id,
            envelope.key_id,
            subject,
        )
        return token

    @staticmethod
    def _check_request(
        client_app_id: str,
        audience: Sequence[str],
        issued_at: int,
        expires_at: int,
        signing_key_id: str,
    ) -> None:
        if not client_app_id or not client_app_id.strip():
            raise ValueError("client_app_id must be a non-empty string")
        if not signing_key_id or not signing_key_id.strip():
            raise ValueError("signing_key_id must be a non-empty string")
        if isinstance(audience, str) or not audience:
            raise ValueError("audience must be a non-empty list of strings")
        for timestamp in (issued_at, expires_at):
            if isinstance(timestamp, bool) or not isinstance(timestamp, int):
                raise ValueError("issued_at and expires_at must be integer Unix timestamps")
        if expires_at <= issued_at:
            raise ValueError("expires_at must be later than issued_at")
