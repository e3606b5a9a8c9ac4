"""
Pydantic schemas for document API requests/responses.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from corpus_tool.models import ContentType, DocumentRecord


class DocumentFields(BaseModel):
    """Fields entered by the operator in the curation form.

    Required fields default to empty so that missing values are reported by
    the record validation with a readable message rather than a schema error.
    """

    title: str = ""
    author: str = ""
    content_type: Optional[ContentType] = None
    content_text: str = ""
    language: str = "en-US"
    publisher: Optional[str] = None
    isbn: Optional[str] = None
    publication_date: Optional[str] = None
    genre: Optional[str] = None
    chapter_section: Optional[str] = None
    page_numbers: Optional[str] = None
    source_url: Optional[str] = None
    weighting: int = 1

    @field_validator("content_type", mode="before")
    @classmethod
    def empty_content_type(cls, value):
        # An unselected <select> posts an empty string
        if isinstance(value, str) and not value.strip():
            return None
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "title": "A Tale of Two Cities",
                "author": "Charles Dickens",
                "content_type": "book",
                "content_text": "It was the best of times,\nit was the worst of times.",
                "language": "en-US",
                "chapter_section": "Book 1, Chapter 1",
                "weighting": 1,
            }
        }


class TextStatsResponse(BaseModel):
    characters: int
    words: int
    tokens: int


class PreviewResponse(BaseModel):
    """A built record shown to the operator before submission."""

    document: DocumentRecord
    stats: TextStatsResponse


class InsertResponse(BaseModel):
    success: bool = True
    insertedId: str
    message: str = "Document successfully added to corpus"


class DocumentSummary(BaseModel):
    """Schema for document list entries (no content text)."""

    document_id: str
    title: str
    author: str
    content_type: str
    created_at: datetime
    character_count: int
    weighting: int

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "DocumentSummary":
        attribution = record.get("attribution", {})
        training = record.get("training_metadata", {})
        return cls(
            document_id=record["document_id"],
            title=attribution.get("title", ""),
            author=attribution.get("author", ""),
            content_type=attribution.get("content_type", ""),
            created_at=record["created_at"],
            character_count=training.get("character_count", 0),
            weighting=training.get("weighting", 1),
        )


class DocumentUpdate(BaseModel):
    """Partial update for a stored record.

    Keys are top-level record fields or dotted paths such as
    ``attribution.publisher``.
    """

    patch: Dict[str, Any] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "patch": {
                    "attribution.publisher": "Chapman & Hall",
                    "training_metadata.weighting": 2,
                }
            }
        }


class CollectionStats(BaseModel):
    totalDocuments: int = 0
    totalCharacters: int = 0
    totalTokens: int = 0
    averageWeight: float = 0
    contentTypes: List[str] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    success: bool = True
    deletedCount: int
