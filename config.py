# config.py
import os
from pathlib import Path

from dotenv import load_dotenv

from errors import ConfigurationError

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

DEFAULT_VERSIONS = [
    'ACF', 'ARA', 'ARC', 'AS21', 'JFAA', 'KJA', 'KJF', 'NAA', 'NBV', 'NTLH', 'NVI', 'NVT', 'TB'
]


def _split_list(value):
    return [item.strip() for item in value.split(',') if item.strip()]


def _optional_float(name):
    value = os.getenv(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}")


class Config:
    # 'remote' downloads zipped bundles, 'directory' scans BIBLE_ASSETS_DIR
    BIBLE_SOURCE = os.getenv('BIBLE_SOURCE', 'remote').strip().lower()
    BIBLE_VERSIONS_EXPLICIT = bool(os.getenv('BIBLE_VERSIONS'))
    BIBLE_VERSIONS = _split_list(os.getenv('BIBLE_VERSIONS', '')) or list(DEFAULT_VERSIONS)
    # e.g. https://example.org/bibles/{identifier}.zip
    BIBLE_ARCHIVE_URL = os.getenv('BIBLE_ARCHIVE_URL')
    BIBLE_ASSETS_DIR = Path(os.getenv('BIBLE_ASSETS_DIR', BASE_DIR / 'assets'))
    BIBLE_MARKER_FILE = os.getenv('BIBLE_MARKER_FILE', 'metadata.xml')
    BIBLE_FETCH_TIMEOUT = _optional_float('BIBLE_FETCH_TIMEOUT')
    PORT = int(os.getenv('PORT', 8081))
