# models/bible.py
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Verse:
    number: int
    text: str

    def __post_init__(self):
        if self.number < 1:
            raise ValueError(f"Verse number must be positive, got {self.number}")
        if not self.text:
            raise ValueError(f"Verse {self.number} has no text")

    def to_json(self):
        return {
            "number": self.number,
            "text": self.text
        }


@dataclass(frozen=True)
class Chapter:
    number: int
    verses: Tuple[Verse, ...] = ()

    def __post_init__(self):
        if self.number < 1:
            raise ValueError(f"Chapter number must be positive, got {self.number}")
        # Accept any sequence from the parser but keep an immutable copy
        object.__setattr__(self, 'verses', tuple(self.verses))
        _ensure_unique([v.number for v in self.verses], f"verse number in chapter {self.number}")

    def to_json(self):
        return {
            "number": self.number,
            "verses": [verse.to_json() for verse in self.verses]
        }


@dataclass(frozen=True)
class Book:
    id: str
    name: str
    chapters: Tuple[Chapter, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'chapters', tuple(self.chapters))
        _ensure_unique([c.number for c in self.chapters], f"chapter number in book {self.id}")

    def get_chapter(self, number: int) -> Optional[Chapter]:
        for chapter in self.chapters:
            if chapter.number == number:
                return chapter
        return None

    def to_json(self):
        return {
            "id": self.id,
            "name": self.name,
            "chapters": [chapter.to_json() for chapter in self.chapters]
        }


@dataclass(frozen=True)
class Translation:
    identifier: str
    name: str
    abbreviation: str
    books: Tuple[Book, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'books', tuple(self.books))
        _ensure_unique([b.id for b in self.books], f"book id in version {self.identifier}")

    def get_book(self, book_id: str) -> Optional[Book]:
        for book in self.books:
            if book.id == book_id:
                return book
        return None

    def verse_count(self) -> int:
        return sum(len(chapter.verses) for book in self.books for chapter in book.chapters)

    def summary_json(self):
        """Version metadata without book content."""
        return {
            "name": self.name,
            "abbreviation": self.abbreviation,
            "books": [{"id": book.id, "name": book.name} for book in self.books]
        }

    def to_json(self):
        return {
            "identifier": self.identifier,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "books": [book.to_json() for book in self.books]
        }


def _ensure_unique(keys, label):
    seen = set()
    for key in keys:
        if key in seen:
            raise ValueError(f"Duplicate {label}: {key}")
        seen.add(key)
