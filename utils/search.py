# utils/search.py
from dataclasses import dataclass
from typing import Tuple

from models import Translation


@dataclass(frozen=True)
class SearchMatch:
    book_id: str
    book_name: str
    chapter: int
    verse: int
    text: str

    def to_json(self):
        return {
            "book": {"id": self.book_id, "name": self.book_name},
            "chapter": self.chapter,
            "verse": {"number": self.verse, "text": self.text}
        }


@dataclass(frozen=True)
class SearchResults:
    query: str
    results: Tuple[SearchMatch, ...] = ()

    @property
    def total_results(self) -> int:
        return len(self.results)

    def to_json(self):
        return {
            "query": self.query,
            "totalResults": self.total_results,
            "results": [match.to_json() for match in self.results]
        }


class BibleSearchEngine:
    """Literal substring search over a loaded version.

    Matching is case-sensitive with no normalization, and results come back
    in document order (book, chapter, verse). The engine keeps no state, so
    one instance can serve concurrent requests.
    """

    def search(self, translation: Translation, query: str) -> SearchResults:
        """Return one match per verse whose text contains ``query``."""
        if not query:
            raise ValueError("Search query must not be empty")

        results = []
        for book in translation.books:
            for chapter in book.chapters:
                for verse in chapter.verses:
                    if query in verse.text:
                        results.append(SearchMatch(
                            book_id=book.id,
                            book_name=book.name,
                            chapter=chapter.number,
                            verse=verse.number,
                            text=verse.text
                        ))
        return SearchResults(query=query, results=tuple(results))
