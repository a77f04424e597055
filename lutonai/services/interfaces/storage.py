"""
File storage interface.
Allows swapping where uploads live without touching the services that own them.
"""

from abc import ABC, abstractmethod

from fastapi import UploadFile


class StorageBackend(ABC):
    """
    Interface for upload storage.

    Implementations:
    - LocalStorage: files on local disk, served under /uploads
    """

    @abstractmethod
    async def save(self, file: UploadFile, folder: str) -> str:
        """
        Validate and persist an uploaded file.

        Args:
            file: The uploaded file
            folder: Logical folder (events, sponsors, ...)

        Returns:
            Public URL stored on the owning record
        """

    @abstractmethod
    async def delete(self, url: str) -> bool:
        """
        Remove a previously stored file.

        Returns:
            True if a file was removed, False if the URL is not managed here
        """
