# scripts/export_version.py
import sys
import logging
from pathlib import Path

# Add the parent directory to the Python path properly
current_dir = Path(__file__).resolve().parent
backend_dir = current_dir.parent
sys.path.insert(0, str(backend_dir))

from config import Config
from errors import BibleError
from utils.cache import create_source, populate
from utils.export import archive_filename, package_translation

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def export_version(version_id, output_dir):
    """Load one version from the configured source and write <version_id>.zip to output_dir"""
    print(f"Loading {version_id} ({Config.BIBLE_SOURCE} mode)...")

    cache, report = populate(create_source(Config), [version_id])
    bible = cache.get(version_id)
    if bible is None:
        reason = report.failures[0] if report.failures else "no bundle found"
        print(f"Could not load {version_id}: {reason}")
        return None

    print(f"Loaded {bible.name} with {len(bible.books)} books and {bible.verse_count()} verses")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / archive_filename(version_id)
    output_path.write_bytes(package_translation(bible))

    print(f"\nExport complete: {output_path}")
    return output_path


if __name__ == '__main__':
    if len(sys.argv) not in (2, 3):
        print("Usage: python export_version.py <version_id> [output_dir]")
        sys.exit(1)

    version_id = sys.argv[1]
    output_dir = sys.argv[2] if len(sys.argv) == 3 else '.'
    try:
        path = export_version(version_id, output_dir)
    except BibleError as e:
        print(f"Error: {e}")
        sys.exit(1)
    sys.exit(0 if path else 1)
