"""Document storage abstraction.

Project documents live in an object store; the rest of the application only
talks to :class:`DocumentStorage` so the backend (S3, MinIO, an in-memory
fake in tests) can be swapped without touching the services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class DocumentStorage(ABC):
    """Storage for project PDFs, addressed by document path."""

    @staticmethod
    def object_key(document_path: str) -> str:
        return f"{document_path}.pdf"

    @abstractmethod
    async def put(self, document_path: str, data: bytes, content_type: str | None = None) -> None:
        """Store *data* under the document path."""

    @abstractmethod
    async def delete(self, document_path: str) -> None:
        """Remove the stored document."""

    @abstractmethod
    async def signed_url(self, document_path: str, expires_in: int) -> str:
        """Return a time-limited retrieval URL."""
