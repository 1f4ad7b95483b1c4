# services/bible_service.py
"""
Read-only lookups over the translation cache.

Every method either returns the requested object or raises NotFoundError /
InvalidInputError / PackagingError, which the routes turn into HTTP responses.
Input is validated before the cache or the search engine is touched.
"""
import logging
from typing import List, Optional

from errors import InvalidInputError, NotFoundError
from models import Book, Chapter, Translation
from utils.cache import TranslationCache
from utils.export import package_translation
from utils.search import BibleSearchEngine, SearchResults

logger = logging.getLogger(__name__)


class BibleService:
    def __init__(self, cache: TranslationCache, search_engine: Optional[BibleSearchEngine] = None):
        self.cache = cache
        self.search_engine = search_engine or BibleSearchEngine()

    def list_identifiers(self) -> List[str]:
        return self.cache.list()

    def get_translation(self, identifier: str) -> Translation:
        bible = self.cache.get(identifier)
        if bible is None:
            raise NotFoundError('Version not found.')
        return bible

    def get_book(self, identifier: str, book_id: str) -> Book:
        book = self.get_translation(identifier).get_book(book_id)
        if book is None:
            raise NotFoundError('Book not found.')
        return book

    def get_chapter(self, identifier: str, book_id: str, chapter) -> Chapter:
        """Look up a chapter; ``chapter`` is the raw path segment."""
        chapter_number = _parse_chapter_number(chapter)
        if chapter_number is None:
            raise InvalidInputError('Invalid chapter number.')

        book = self.get_translation(identifier).get_book(book_id)
        found = book.get_chapter(chapter_number) if book is not None else None
        if found is None:
            raise NotFoundError('Book or Chapter not found.')
        return found

    def search(self, identifier: str, query: Optional[str]) -> SearchResults:
        if not query:
            raise InvalidInputError('Search query (q) is required.')

        bible = self.get_translation(identifier)
        results = self.search_engine.search(bible, query)
        logger.info(f"Search for {query!r} in {identifier} returned {results.total_results} result(s)")
        return results

    def export_archive(self, identifier: str) -> bytes:
        return package_translation(self.get_translation(identifier))


def _parse_chapter_number(raw) -> Optional[int]:
    if isinstance(raw, int):
        return raw
    raw = (raw or '').strip()
    # ASCII digits only
    if not raw.isascii() or not raw.isdigit():
        return None
    return int(raw)
