"""
Infrastructure adapter: AWS KMS → IKeyManagementService.

All boto3/botocore details are confined here. Service errors (ClientError) and
transport errors (BotoCoreError, including connect/read timeouts) are wrapped in
the domain's KeyGenerationError / KeyDecryptionError with the original chained
as __cause__. Retries are left to botocore's own retry configuration.
"""

import logging
import os
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from kms_jwt.domain.entities.envelope import DataKey
from kms_jwt.domain.exceptions import KeyDecryptionError, KeyGenerationError
from kms_jwt.domain.ports.key_management_port import IKeyManagementService

logger = logging.getLogger(__name__)


class Boto3KmsAdapter(IKeyManagementService):
    """Generates and unwraps data keys with the AWS KMS API."""

    def __init__(self, region: Optional[str] = None, client: Any = None) -> None:
        """
        Args:
            region: AWS region; falls back to AWS_DEFAULT_REGION, then us-east-1.
            client: Optional pre-built boto3 KMS client (e.g. one wrapped in a
                    botocore Stubber). Pass nothing for normal instantiation.
        """
        if client is not None:
            self._client = client
        else:
            self._client = boto3.client(
                "kms",
                region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
            )

    def generate_data_key(self, key_id: str, key_spec: str) -> DataKey:
        try:
            response = self._client.generate_data_key(KeyId=key_id, KeySpec=key_spec)
        except (ClientError, BotoCoreError) as exc:
            logger.warning("KMS GenerateDataKey failed for key %s: %s", key_id, exc)
            raise KeyGenerationError(f"KMS could not generate a data key: {exc}") from exc
        return DataKey(plaintext=response["Plaintext"], ciphertext=response["CiphertextBlob"])

    def decrypt(self, ciphertext: bytes) -> bytes:
        try:
            response = self._client.decrypt(CiphertextBlob=ciphertext)
        except (ClientError, BotoCoreError) as exc:
            logger.warning("KMS Decrypt failed: %s", exc)
            raise KeyDecryptionError(f"KMS could not decrypt the data key: {exc}") from exc
        return response["Plaintext"]
