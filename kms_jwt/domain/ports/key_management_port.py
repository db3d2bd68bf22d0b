"""
Port (interface) for key-management services.
Infrastructure adapters (e.g. Boto3KmsAdapter) must implement this interface.
"""

from abc import ABC, abstractmethod

from kms_jwt.domain.entities.envelope import DataKey


class IKeyManagementService(ABC):
    @abstractmethod
    def generate_data_key(self, key_id: str, key_spec: str) -> DataKey:
        """Generate a fresh data key wrapped under the master key *key_id*.

        Raises:
            KeyGenerationError: if the service rejects the request or is unreachable.
        """
        ...

    @abstractmethod
    def decrypt(self, ciphertext: bytes) -> bytes:
        """Unwrap a data key ciphertext and return the plaintext key.

        Raises:
            KeyDecryptionError: if the service refuses or fails to decrypt.
        """
        ...
