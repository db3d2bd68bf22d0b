"""
FastAPI entry point: a verifying service guarded by envelope tokens.

This module is the Composition Root for HTTP runs: create_app_from_env() wires
Boto3KmsAdapter, JoseTokenCore and (when configured) RedisKeyCache into a
TokenWithEnvelope and passes it to create_app(). Every rejected bearer token is
answered with 401; the error class is logged so operators can tell KMS or cache
outages from signature failures.

Run locally:
    uvicorn kms_jwt.infrastructure.entrypoints.fastapi_app:create_app_from_env --factory --port 8000
"""

import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request

from kms_jwt.application.services.token_with_envelope import TokenWithEnvelope
from kms_jwt.domain.entities.token import Token
from kms_jwt.domain.exceptions import EnvelopeTokenError
from kms_jwt.domain.ports.key_cache_port import IKeyCache
from kms_jwt.infrastructure.cache.redis_cache import RedisKeyCache
from kms_jwt.infrastructure.config.settings import KmsJwtSettings
from kms_jwt.infrastructure.kms.boto3_kms_adapter import Boto3KmsAdapter
from kms_jwt.infrastructure.token.jose_token_core import JoseTokenCore

logger = logging.getLogger(__name__)


def create_app(
    token_service: TokenWithEnvelope,
    signing_key_id: str,
    cache: Optional[IKeyCache] = None,
) -> FastAPI:
    app = FastAPI(title="KMS JWT Verifier")

    def get_current_token(request: Request) -> Token:
        """FastAPI dependency: verify the envelope token from the Authorization header.

        Declared sync so FastAPI runs the blocking KMS/cache round trips in its
        threadpool instead of on the event loop.
        """
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
        serialized = auth_header.split(" ", 1)[1]
        try:
            return token_service.parse_and_verify_token(serialized, signing_key_id, cache)
        except EnvelopeTokenError as exc:
            logger.warning("Rejected bearer token (%s): %s", type(exc).__name__, exc)
            raise HTTPException(status_code=401, detail=str(exc)) from exc

    @app.get("/me")
    async def read_claims(token: Token = Depends(get_current_token)):
        """Return the verified claims of the caller's token."""
        return {"claims": dict(token.claims)}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def create_app_from_env() -> FastAPI:
    load_dotenv()
    settings = KmsJwtSettings.from_env()

    token_service = TokenWithEnvelope.create(
        JoseTokenCore(),
        Boto3KmsAdapter(region=settings.aws_region),
    )
    cache = RedisKeyCache.from_url(settings.redis_url) if settings.redis_url else None
    return create_app(token_service, settings.signing_key_id, cache)
