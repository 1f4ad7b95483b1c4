# utils/usx_parser.py
"""
Parser for Digital Bible Library style text bundles.

A bundle is a directory (or the same tree inside a zip archive) holding a
``metadata.xml`` descriptor and one USX file per book. The descriptor gives
the version name, abbreviation, book order and book display names; the USX
files carry the text, delimited by ``<chapter>`` and ``<verse>`` milestones.

Both entry points return a fully built Translation or raise
BundleParseError. Nothing partial is ever returned.
"""
import io
import logging
import posixpath
import re
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from lxml import etree

from errors import BundleParseError
from models import Verse, Chapter, Book, Translation

logger = logging.getLogger(__name__)

METADATA_FILE = 'metadata.xml'
USX_SUFFIX = '.usx'

# Protestant canon order, used when metadata.xml does not declare one
CANONICAL_BOOK_ORDER = [
    'GEN', 'EXO', 'LEV', 'NUM', 'DEU', 'JOS', 'JDG', 'RUT', '1SA', '2SA',
    '1KI', '2KI', '1CH', '2CH', 'EZR', 'NEH', 'EST', 'JOB', 'PSA', 'PRO',
    'ECC', 'SNG', 'ISA', 'JER', 'LAM', 'EZK', 'DAN', 'HOS', 'JOL', 'AMO',
    'OBA', 'JON', 'MIC', 'NAM', 'HAB', 'ZEP', 'HAG', 'ZEC', 'MAL',
    'MAT', 'MRK', 'LUK', 'JHN', 'ACT', 'ROM', '1CO', '2CO', 'GAL', 'EPH',
    'PHP', 'COL', '1TH', '2TH', '1TI', '2TI', 'TIT', 'PHM', 'HEB', 'JAS',
    '1PE', '2PE', '1JN', '2JN', '3JN', 'JUD', 'REV',
]

# Elements whose content never belongs to verse text
SKIPPED_ELEMENTS = {'book', 'note', 'figure', 'sidebar', 'ms', 'optbreak'}

# Paragraph styles (without trailing level digits) for titles, headings and
# introductions
HEADING_STYLES = {
    'h', 'toc', 'toca', 'mt', 'mte', 'ms', 'mr', 's', 'sr', 'r', 'd', 'sp',
    'cl', 'cp', 'cd', 'rem', 'restore', 'qa', 'lit',
    'imt', 'imte', 'is', 'ip', 'ipi', 'im', 'imi', 'ipq', 'imq', 'ipr',
    'iq', 'ib', 'ili', 'iot', 'io', 'iex', 'ie',
}

BOOK_CODE_PATTERN = re.compile(r'[0-9A-Z]{3}')
LEADING_NUMBER_PATTERN = re.compile(r'\s*(\d+)')

_xml_parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


@dataclass
class BundleMetadata:
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    book_order: List[str] = field(default_factory=list)
    book_names: Dict[str, str] = field(default_factory=dict)


def parse_bundle_directory(path, identifier: Optional[str] = None) -> Translation:
    """Parse the bundle rooted at ``path`` (the directory holding metadata.xml).

    The version identifier defaults to the directory name.
    """
    path = Path(path)
    identifier = identifier or path.name
    try:
        metadata = (path / METADATA_FILE).read_bytes()
        documents = [
            (usx_path.relative_to(path).as_posix(), usx_path.read_bytes())
            for usx_path in sorted(path.rglob('*'))
            if usx_path.is_file() and usx_path.suffix.lower() == USX_SUFFIX
        ]
    except OSError as e:
        raise BundleParseError(f"Cannot read bundle {path}: {e}") from e

    return build_translation(identifier, metadata, documents)


def parse_bundle_archive(data: bytes, identifier: str) -> Translation:
    """Parse a zipped bundle held in memory.

    The bundle root is the directory of the shallowest ``metadata.xml``
    member, so archives that wrap the bundle in extra folders still load.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise BundleParseError(f"Archive for {identifier} is not a valid zip file") from e

    with archive:
        members = [name for name in archive.namelist() if not name.endswith('/')]
        markers = [name for name in members if posixpath.basename(name) == METADATA_FILE]
        if not markers:
            raise BundleParseError(f"Archive for {identifier} has no {METADATA_FILE}")

        marker = min(markers, key=lambda name: (name.count('/'), name))
        prefix = posixpath.dirname(marker)
        prefix = f"{prefix}/" if prefix else ''
        try:
            metadata = archive.read(marker)
            documents = [
                (name[len(prefix):], archive.read(name))
                for name in sorted(members)
                if name.startswith(prefix) and name.lower().endswith(USX_SUFFIX)
            ]
        except (zipfile.BadZipFile, zlib.error, OSError, EOFError, RuntimeError, NotImplementedError) as e:
            # corrupt deflate stream, truncated data, encrypted or unsupported members
            raise BundleParseError(f"Archive for {identifier} is corrupt: {e}") from e

    return build_translation(identifier, metadata, documents)


def build_translation(identifier: str, metadata: bytes, documents: List[Tuple[str, bytes]]) -> Translation:
    """Assemble a Translation from raw metadata.xml bytes and (name, bytes) USX documents."""
    meta = parse_metadata(metadata)

    books = {}
    for name, content in documents:
        book = parse_usx(content, name, meta.book_names)
        if book.id in books:
            raise BundleParseError(f"Book {book.id} appears twice in {identifier} ({name})")
        books[book.id] = book

    if not books:
        raise BundleParseError(f"No USX books found for {identifier}")

    rank = {code: i for i, code in enumerate(meta.book_order or CANONICAL_BOOK_ORDER)}
    ordered = sorted(books.values(), key=lambda b: rank.get(b.id, len(rank)))

    logger.debug(f"Parsed {len(ordered)} books for {identifier}")
    return Translation(
        identifier=identifier,
        name=meta.name or identifier,
        abbreviation=meta.abbreviation or identifier,
        books=ordered
    )


def parse_metadata(data: bytes) -> BundleMetadata:
    root = _parse_xml(data, METADATA_FILE)
    meta = BundleMetadata(
        name=_first_text(root, 'identification/nameLocal', 'identification/name'),
        abbreviation=_first_text(root, 'identification/abbreviationLocal', 'identification/abbreviation'),
    )

    # DBL 2.x: <names> keyed by id, referenced from the publication structure
    labels = {
        el.get('id'): _first_text(el, 'short', 'long', 'abbr')
        for el in root.findall('names/name')
    }
    publications = root.findall('publications/publication')
    publication = next((p for p in publications if p.get('default') == 'true'), None)
    if publication is None and publications:
        publication = publications[0]
    if publication is not None:
        for content in publication.iter('content'):
            code = content.get('role') or ''
            if not BOOK_CODE_PATTERN.fullmatch(code) or code in meta.book_order:
                continue
            meta.book_order.append(code)
            label = labels.get(content.get('name'))
            if label:
                meta.book_names[code] = label

    # DBL 1.x: <bookNames> and <contents><bookList>
    for el in root.findall('bookNames/book'):
        code = el.get('code')
        label = _first_text(el, 'short', 'long', 'abbr')
        if code and label:
            meta.book_names.setdefault(code, label)
    if not meta.book_order:
        book_list = root.find('contents/bookList')
        if book_list is not None:
            meta.book_order = [el.get('code') for el in book_list.iter('book') if el.get('code')]

    return meta


def parse_usx(data: bytes, source_name: str, book_names: Optional[Dict[str, str]] = None) -> Book:
    """Parse one USX document into a Book."""
    root = _parse_xml(data, source_name)
    book_el = root.find('book')
    code = book_el.get('code') if book_el is not None else None
    if not code:
        raise BundleParseError(f"{source_name} has no <book code=...> element")

    builder = _BookBuilder(code, source_name)
    builder.walk(root)

    name = (book_names or {}).get(code) or builder.heading or code
    try:
        return builder.build(name)
    except ValueError as e:
        raise BundleParseError(f"{source_name}: {e}") from e


class _BookBuilder:
    """Collects verse text in document order while walking a USX tree."""

    def __init__(self, code, source_name):
        self.code = code
        self.source_name = source_name
        self.heading = None
        self.chapters = []  # (number, {verse_number: [text parts]})
        self.current_verse = None

    def walk(self, element):
        for child in element:
            if not isinstance(child.tag, str):
                # processing instruction
                self.add_text(child.tail)
                continue

            tag = child.tag
            style = child.get('style') or ''
            if tag == 'chapter':
                if child.get('number'):
                    self.start_chapter(child.get('number'))
                else:
                    self.current_verse = None
            elif tag == 'verse':
                if child.get('number'):
                    self.start_verse(child.get('number'))
                else:
                    self.current_verse = None
            elif tag in SKIPPED_ELEMENTS:
                pass
            elif tag == 'para' and style.rstrip('0123456789') in HEADING_STYLES:
                if style == 'h' and self.heading is None:
                    self.heading = _collapse(''.join(child.itertext())) or None
            else:
                if tag == 'para':
                    self.add_text(' ')
                self.add_text(child.text)
                self.walk(child)

            self.add_text(child.tail)

    def start_chapter(self, raw):
        number = _leading_number(raw)
        if number is None:
            raise BundleParseError(f"{self.source_name}: invalid chapter number {raw!r}")
        self.chapters.append((number, {}))
        self.current_verse = None

    def start_verse(self, raw):
        number = _leading_number(raw)
        if number is None:
            raise BundleParseError(f"{self.source_name}: invalid verse number {raw!r}")
        if not self.chapters:
            raise BundleParseError(f"{self.source_name}: verse {raw} appears before any chapter")

        chapter_number, verses = self.chapters[-1]
        if verses and number < next(reversed(verses)):
            raise BundleParseError(
                f"{self.source_name}: verse {number} out of order in chapter {chapter_number}"
            )
        # Segments such as 3a/3b share one verse
        verses.setdefault(number, [])
        self.current_verse = verses[number]

    def add_text(self, text):
        if text and self.current_verse is not None:
            self.current_verse.append(text)

    def build(self, name):
        chapters = []
        for number, verses in self.chapters:
            built = []
            for verse_number, parts in verses.items():
                text = _collapse(''.join(parts))
                if text:
                    built.append(Verse(number=verse_number, text=text))
            chapters.append(Chapter(number=number, verses=built))
        return Book(id=self.code, name=name, chapters=chapters)


def _parse_xml(data, source_name):
    try:
        root = etree.fromstring(data, parser=_xml_parser)
    except etree.XMLSyntaxError as e:
        raise BundleParseError(f"Malformed XML in {source_name}: {e}") from e

    # Match on local names only
    for el in root.iter():
        if isinstance(el.tag, str):
            el.tag = etree.QName(el).localname
    return root


def _first_text(element, *paths):
    for path in paths:
        text = element.findtext(path)
        if text and text.strip():
            return text.strip()
    return None


def _leading_number(raw):
    match = LEADING_NUMBER_PATTERN.match(raw or '')
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def _collapse(text):
    return ' '.join(text.split())
