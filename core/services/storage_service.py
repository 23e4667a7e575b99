# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles audio upload/download/delete against the Supabase Storage bucket.
# Paths look like users/{user_id}/audio-{uuid}{ext} (see lib/audio_files.py).
# =============================================================================

import logging
import posixpath
from typing import Any

from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import StorageUploadError, StorageDownloadError

logger = logging.getLogger(__name__)


def _bucket():
    return SupabaseClient.get_client().storage.from_(settings.STORAGE_BUCKET)


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles uploading, inspecting and removing audio recordings.
    """

    @staticmethod
    def upload_audio(
        path: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str:
        """
        Upload raw audio bytes to storage.

        Args:
            path: Destination path in the bucket
            content: File bytes
            content_type: MIME type reported by the client

        Returns:
            Storage path where file was uploaded

        Raises:
            StorageUploadError: If upload fails
        """
        try:
            _bucket().upload(
                path=path,
                file=content,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "upsert": "false",
                },
            )
            logger.info(f"Uploaded audio to storage: {path} ({len(content)} bytes)")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

    @staticmethod
    def download_audio(storage_path: str) -> bytes:
        """
        Download an audio file from storage.

        Raises:
            StorageDownloadError: If download fails
        """
        try:
            content = _bucket().download(storage_path)
            logger.info(f"Downloaded audio from storage: {storage_path} ({len(content)} bytes)")
            return content

        except Exception as e:
            logger.error(f"Storage download failed: {e}")
            raise StorageDownloadError(storage_path, str(e))

    @staticmethod
    def file_info(storage_path: str) -> dict[str, Any] | None:
        """
        Look up a stored object's listing entry.

        Returns:
            Dict with at least "name" and "size" (bytes), or None if the
            object does not exist
        """
        folder, name = posixpath.split(storage_path)

        try:
            entries = _bucket().list(folder, {"search": name, "limit": 100})
        except Exception as e:
            logger.error(f"Failed to stat {storage_path}: {e}")
            raise StorageDownloadError(storage_path, str(e))

        for entry in entries or []:
            if entry.get("name") == name:
                metadata = entry.get("metadata") or {}
                return {
                    "name": name,
                    "path": storage_path,
                    "size": metadata.get("size"),
                    "mimetype": metadata.get("mimetype"),
                }
        return None

    @staticmethod
    def delete_file(storage_path: str) -> bool:
        """
        Delete a file from storage.

        Returns:
            True if deleted successfully, False otherwise (never raises)
        """
        try:
            _bucket().remove([storage_path])
            logger.info(f"Deleted file from storage: {storage_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to delete file {storage_path}: {e}")
            return False
