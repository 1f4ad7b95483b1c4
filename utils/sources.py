# utils/sources.py
"""
Sources that produce a populated Translation for one version identifier.

RemoteArchiveSource downloads a zipped bundle per version; LocalDirectorySource
discovers bundles below a local assets directory. Both hand the raw input to a
parser and return the same Translation shape, so the cache does not care which
one is in use. The source is chosen once at startup from configuration.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import requests

from errors import BibleError, SourceRootNotFoundError, TranslationLoadError
from models import Translation
from utils.usx_parser import METADATA_FILE, parse_bundle_archive, parse_bundle_directory

logger = logging.getLogger(__name__)


class TranslationSource:
    """Interface shared by the remote and local strategies."""

    mode = None

    def identifiers(self, requested: Optional[Iterable[str]] = None) -> List[str]:
        """Return the version identifiers to load, in load order."""
        raise NotImplementedError

    def load(self, identifier: str) -> Optional[Translation]:
        """
        Load one version.

        Returns:
            The Translation, or None when the source has nothing for this
            identifier and it should be skipped silently

        Raises:
            TranslationLoadError: If fetching or parsing fails
        """
        raise NotImplementedError


class RemoteArchiveSource(TranslationSource):
    """
    Downloads one zipped bundle per version.

    Usage:
        source = RemoteArchiveSource("https://example.org/bibles/{identifier}.zip")
        bible = source.load("KJA")
    """

    mode = 'remote'

    def __init__(self, url_template: str, parser=parse_bundle_archive, timeout: Optional[float] = None, session=None):
        self.url_template = url_template
        self.parser = parser
        # None means wait for the transport; no retries either way
        self.timeout = timeout
        self.session = session or requests.Session()

    def identifiers(self, requested=None):
        return list(requested or [])

    def url_for(self, identifier: str) -> str:
        return self.url_template.format(identifier=identifier)

    def load(self, identifier):
        url = self.url_for(identifier)
        logger.info(f"Downloading {identifier} from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TranslationLoadError(identifier, f"download failed: {e}") from e

        if response.status_code == 404:
            raise TranslationLoadError(identifier, f"not found at {url}")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise TranslationLoadError(identifier, f"download failed: {e}") from e

        try:
            return self.parser(response.content, identifier)
        except BibleError as e:
            raise TranslationLoadError(identifier, f"malformed archive: {e}") from e
        except Exception as e:
            logger.exception(f"Unexpected error parsing archive for {identifier}")
            raise TranslationLoadError(identifier, f"malformed archive: {e!r}") from e


class LocalDirectorySource(TranslationSource):
    """
    Loads bundles from a local assets directory laid out as
    ``<root>/<identifier>/.../metadata.xml``.

    Each top-level subdirectory is a candidate version. The first directory
    below it (depth-first, sorted by name) holding the marker file is parsed.
    """

    mode = 'directory'

    def __init__(self, root, marker: str = METADATA_FILE, parser=parse_bundle_directory):
        self.root = Path(root)
        self.marker = marker
        self.parser = parser

    def identifiers(self, requested=None):
        if not self.root.is_dir():
            raise SourceRootNotFoundError(self.root)

        found = sorted(p.name for p in self.root.iterdir() if p.is_dir())
        if requested:
            wanted = set(requested)
            found = [name for name in found if name in wanted]
        return found

    def load(self, identifier):
        version_dir = self.root / identifier
        bundle_dir = find_marker_directory(version_dir, self.marker)
        if bundle_dir is None:
            logger.info(f"No {self.marker} found under {version_dir}, skipping {identifier}")
            return None

        logger.info(f"Loading {identifier} from {bundle_dir}")
        try:
            return self.parser(bundle_dir, identifier=identifier)
        except BibleError as e:
            raise TranslationLoadError(identifier, str(e)) from e
        except Exception as e:
            logger.exception(f"Unexpected error parsing {bundle_dir}")
            raise TranslationLoadError(identifier, f"parse failed: {e!r}") from e


def find_marker_directory(directory, marker: str = METADATA_FILE) -> Optional[Path]:
    """
    Depth-first search for the first directory containing ``marker``.

    The directory itself is checked first, then its subdirectories in name
    order. Returns None when no directory in the tree holds the marker.
    """
    directory = Path(directory)
    if (directory / marker).is_file():
        return directory

    try:
        children = sorted(p for p in directory.iterdir() if p.is_dir())
    except OSError as e:
        logger.warning(f"Cannot list {directory}: {e}")
        return None

    for child in children:
        found = find_marker_directory(child, marker)
        if found is not None:
            return found
    return None
