# utils/cache.py
"""
In-memory store of loaded Bible versions.

The cache is built once by ``populate`` during startup and handed to the Flask
app. It has no mutators, so request threads can read it without locking.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Tuple

from errors import ConfigurationError, TranslationLoadError
from models import Translation
from utils.sources import LocalDirectorySource, RemoteArchiveSource, TranslationSource

logger = logging.getLogger(__name__)


class TranslationCache:
    """Read-only mapping from version identifier to Translation."""

    def __init__(self, translations: Optional[Dict[str, Translation]] = None):
        self._translations = MappingProxyType(dict(translations or {}))

    def get(self, identifier: str) -> Optional[Translation]:
        return self._translations.get(identifier)

    def list(self) -> List[str]:
        """Identifiers in load order."""
        return list(self._translations.keys())

    def __contains__(self, identifier):
        return identifier in self._translations

    def __iter__(self):
        return iter(self._translations)

    def __len__(self):
        return len(self._translations)

    def __repr__(self):
        return f'<TranslationCache {", ".join(self._translations) or "empty"}>'


@dataclass
class LoadReport:
    loaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: List[TranslationLoadError] = field(default_factory=list)

    @property
    def failed(self) -> List[str]:
        return [error.identifier for error in self.failures]


def populate(source: TranslationSource, identifiers: Optional[Iterable[str]] = None) -> Tuple[TranslationCache, LoadReport]:
    """
    Load every version the source yields, one at a time.

    A failing version is logged and left out of the cache; the rest still
    load. SourceRootNotFoundError from the source is not caught, since an
    absent assets directory means nothing can be served.
    """
    translations = {}
    report = LoadReport()

    for identifier in source.identifiers(identifiers):
        logger.info(f"Attempting to load version: {identifier}")
        try:
            bible = source.load(identifier)
        except TranslationLoadError as e:
            logger.error(f"Failed to load version {identifier}: {e.reason}")
            report.failures.append(e)
            continue

        if bible is None:
            report.skipped.append(identifier)
            continue

        # Entries are only added once fully built
        translations[identifier] = bible
        report.loaded.append(identifier)
        logger.info(f"Successfully loaded version: {identifier} ({bible.verse_count()} verses)")

    return TranslationCache(translations), report


def create_source(config) -> TranslationSource:
    """Pick the loading strategy named by BIBLE_SOURCE."""
    mode = config.BIBLE_SOURCE
    if mode == RemoteArchiveSource.mode:
        if not config.BIBLE_ARCHIVE_URL:
            raise ConfigurationError("BIBLE_ARCHIVE_URL must be set when BIBLE_SOURCE=remote")
        if '{identifier}' not in config.BIBLE_ARCHIVE_URL:
            raise ConfigurationError("BIBLE_ARCHIVE_URL must contain an {identifier} placeholder")
        try:
            config.BIBLE_ARCHIVE_URL.format(identifier='X')
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f"BIBLE_ARCHIVE_URL may only use the {{identifier}} placeholder: {e!r}"
            ) from e
        return RemoteArchiveSource(config.BIBLE_ARCHIVE_URL, timeout=config.BIBLE_FETCH_TIMEOUT)
    if mode == LocalDirectorySource.mode:
        return LocalDirectorySource(config.BIBLE_ASSETS_DIR, marker=config.BIBLE_MARKER_FILE)
    raise ConfigurationError(f"Unknown BIBLE_SOURCE {mode!r}, expected 'remote' or 'directory'")


def build_cache(config, source: Optional[TranslationSource] = None) -> TranslationCache:
    """Run the startup load phase and log a summary."""
    source = source or create_source(config)
    logger.info(f"Loading Bible versions ({source.mode} mode)...")

    # Directory mode serves whatever it discovers unless versions were named explicitly
    if source.mode == RemoteArchiveSource.mode or config.BIBLE_VERSIONS_EXPLICIT:
        requested = config.BIBLE_VERSIONS
    else:
        requested = None

    cache, report = populate(source, requested)

    if not len(cache):
        logger.warning("No Bible versions were found or loaded.")
    else:
        logger.info(f"Loaded {len(cache)} Bible version(s): {', '.join(cache.list())}")
    if report.failures:
        logger.warning(f"{len(report.failures)} version(s) failed to load: {', '.join(report.failed)}")
    return cache
