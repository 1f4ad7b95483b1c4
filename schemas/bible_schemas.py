from pydantic import BaseModel, ConfigDict, Field
from typing import List

from models import Verse, Chapter, Book, Translation


class VerseSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1)
    text: str = Field(..., min_length=1)


class ChapterSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1)
    verses: List[VerseSchema] = []


class BookSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    chapters: List[ChapterSchema] = []


class TranslationSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    name: str
    abbreviation: str
    books: List[BookSchema] = []

    def to_model(self) -> Translation:
        return Translation(
            identifier=self.identifier,
            name=self.name,
            abbreviation=self.abbreviation,
            books=[
                Book(
                    id=book.id,
                    name=book.name,
                    chapters=[
                        Chapter(
                            number=chapter.number,
                            verses=[Verse(number=v.number, text=v.text) for v in chapter.verses]
                        )
                        for chapter in book.chapters
                    ]
                )
                for book in self.books
            ]
        )


def translation_from_json(data) -> Translation:
    """Rebuild a Translation from the structured form produced by Translation.to_json().

    Raises pydantic.ValidationError when the data does not match the schema and
    ValueError when it violates the uniqueness rules of the model.
    """
    return TranslationSchema.model_validate(data).to_model()
