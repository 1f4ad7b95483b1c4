# This file makes the models directory a Python package
from .bible import Verse, Chapter, Book, Translation

__all__ = [
    'Verse',
    'Chapter',
    'Book',
    'Translation',
]
