# utils/export.py
import io
import json
import logging
import zipfile

from errors import PackagingError
from models import Translation

logger = logging.getLogger(__name__)


def archive_filename(identifier: str) -> str:
    return f"{identifier}.zip"


def member_filename(identifier: str) -> str:
    return f"{identifier}.json"


def package_translation(translation: Translation) -> bytes:
    """
    Pack a version into a zip archive with a single JSON member.

    Returns:
        The archive bytes

    Raises:
        PackagingError: If encoding or compressing fails
    """
    try:
        payload = json.dumps(translation.to_json(), ensure_ascii=False)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(member_filename(translation.identifier), payload.encode('utf-8'))
    except (TypeError, ValueError, OSError, zipfile.BadZipFile) as e:
        logger.error(f"Failed to package version {translation.identifier}: {e}", exc_info=True)
        raise PackagingError(f"Failed to package version {translation.identifier}: {e}") from e

    data = buffer.getvalue()
    logger.info(f"Packaged {translation.identifier} into {len(data)} bytes")
    return data
