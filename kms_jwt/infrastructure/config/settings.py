"""
Infrastructure configuration for the composition root.

The application and domain layers never read the environment; only the
entrypoints build a KmsJwtSettings and wire adapters from it.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field


class KmsJwtSettings(BaseModel):
    """Settings for verifying KMS envelope tokens over HTTP."""

    signing_key_id: str = Field(..., min_length=1, description="Name of the signing key")
    redis_url: Optional[str] = Field(None, description="Redis URL for the plaintext key cache; unset disables caching")
    aws_region: str = Field("us-east-1", description="AWS region of the KMS endpoint")

    @classmethod
    def from_env(cls) -> "KmsJwtSettings":
        """
        Load settings from environment variables.

        Environment variables:
            KMS_JWT_SIGNING_KEY_ID: signing key name (required)
            KMS_JWT_REDIS_URL: Redis URL for the key cache
            AWS_DEFAULT_REGION: AWS region
        """
        signing_key_id = os.getenv("KMS_JWT_SIGNING_KEY_ID", "")
        if not signing_key_id:
            raise ValueError("KMS_JWT_SIGNING_KEY_ID environment variable is required")

        return cls(
            signing_key_id=signing_key_id,
            redis_url=os.getenv("KMS_JWT_REDIS_URL") or None,
            aws_region=os.getenv("AWS_DEFAULT_REGION", "us-east-1"),
        )
