from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for encrypted blob storage backends."""

    @abstractmethod
    def put(self, user_id: str, file_name: str, ciphertext: bytes) -> str:
        """Store ciphertext for a user.

        Args:
            user_id: Owner of the document; storage paths are scoped per user.
            file_name: Original file name, used only for its extension.
            ciphertext: Encrypted document bytes.

        Returns:
            The storage path of the new blob.
        """

    @abstractmethod
    def get(self, path: str) -> bytes:
        """Read a stored blob back by the path returned from put()."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a blob written by put(). A missing blob is not an error."""
