# =============================================================================
# lib/audio_files.py - Audio File Helpers
# =============================================================================
# Pure helpers for audio upload validation and storage naming.
# No I/O here - routers and services decide what to do with the answers.
# =============================================================================

import uuid
from collections.abc import Iterable


def file_extension(filename: str | None) -> str:
    """
    Lower-cased extension including the dot, or "" if there is none.

    Example:
        file_extension("Team Sync.MP3")  # ".mp3"
        file_extension("README")         # ""
    """
    if not filename or "." not in filename:
        return ""
    return "." + filename.rsplit(".", 1)[-1].lower()


def is_audio_file(
    filename: str | None,
    content_type: str | None,
    allowed_mime_types: Iterable[str],
    allowed_extensions: Iterable[str],
) -> bool:
    """
    Check an upload against the MIME and extension allow-lists.

    Browsers are inconsistent about audio MIME types (m4a shows up as
    audio/mp4, audio/x-m4a or application/octet-stream), so a file passes
    when either its MIME type or its extension is allowed.
    """
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime and mime in set(allowed_mime_types):
        return True
    return file_extension(filename) in set(allowed_extensions)


def build_storage_path(user_id: str, filename: str | None) -> str:
    """
    Build a unique storage path for an upload.

    Format: users/{user_id}/audio-{uuid}{ext}
    """
    return f"users/{user_id}/audio-{uuid.uuid4().hex}{file_extension(filename)}"


def format_file_size(size_bytes: int | None) -> str:
    """Human-readable size, e.g. 1536 -> '1.5 KB'."""
    if not size_bytes:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    size = float(size_bytes)
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    if index == 0:
        return f"{int(size)} Bytes"
    return f"{size:.1f} {units[index]}"
