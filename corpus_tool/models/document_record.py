"""
MongoDB model for corpus document records.
One record holds the cleaned text together with its attribution, compliance
and training metadata.
"""
from datetime import datetime, timezone
from typing import List, Optional
import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentType(str, enum.Enum):
    """Kinds of text accepted into the corpus."""
    BOOK = "book"
    ARTICLE = "article"
    ESSAY = "essay"
    ACADEMIC_PAPER = "academic_paper"
    REPORT = "report"
    BLOG_POST = "blog_post"
    TRANSCRIPT = "transcript"
    OTHER = "other"


class Attribution(BaseModel):
    """Authorship and publication metadata."""
    model_config = ConfigDict(use_enum_values=True)

    author: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    publisher: Optional[str] = None
    isbn: Optional[str] = None
    publication_date: Optional[str] = None
    source_url: Optional[str] = None
    content_type: ContentType

    @field_validator("author", "title")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ContentMetadata(BaseModel):
    language: str = "en-US"
    topic_category: List[str] = Field(default_factory=lambda: ["other"])
    genre: Optional[str] = None
    chapter_section: Optional[str] = None
    page_numbers: Optional[str] = None


class OptOutStatus(BaseModel):
    has_opted_out: bool = False
    opt_out_mechanism: str = "not_applicable"
    last_checked: datetime = Field(default_factory=utcnow)


class CopyrightCompliance(BaseModel):
    """Fixed compliance defaults; not editable by the operator."""
    license_status: str = "user_provided"
    fair_use_assessment: str = "not_assessed"
    opt_out_status: OptOutStatus = Field(default_factory=OptOutStatus)
    compliance_date: datetime = Field(default_factory=utcnow)


class LineageStep(BaseModel):
    """One processing step applied to a record's content."""
    step: str
    timestamp: datetime = Field(default_factory=utcnow)
    tool_used: str


class Provenance(BaseModel):
    acquisition_date: datetime = Field(default_factory=utcnow)
    acquisition_method: str = "manual_input"
    original_publication_date: Optional[datetime] = None
    data_lineage: List[LineageStep] = Field(default_factory=list)


class TrainingMetadata(BaseModel):
    """Derived size and weight fields.

    ``token_count`` is ``ceil(character_count / 4)``, a rough estimate rather
    than the output of a real tokenizer.
    """
    character_count: int = Field(..., ge=0)
    token_count: int = Field(..., ge=0)
    processing_status: str = "ready_for_training"
    weighting: int = 1


class AiActCompliance(BaseModel):
    summary_included: bool = True
    transparency_level: str = "full_disclosure"
    documented_for_authorities: bool = True


class DocumentRecord(BaseModel):
    """A single corpus entry as stored in the ``text-corpus`` collection."""

    document_id: str = Field(..., min_length=1)
    content_text: str = Field(..., min_length=1)
    attribution: Attribution
    content_metadata: ContentMetadata = Field(default_factory=ContentMetadata)
    copyright_compliance: CopyrightCompliance = Field(default_factory=CopyrightCompliance)
    provenance: Provenance = Field(default_factory=Provenance)
    training_metadata: TrainingMetadata
    ai_act_compliance: AiActCompliance = Field(default_factory=AiActCompliance)

    # Timestamps and version tracking
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = Field(1, ge=1)

    class Config:
        json_schema_extra = {
            "example": {
                "document_id": "text_content_1718000000000_k3j9x0a1b",
                "content_text": "It was the best of times, it was the worst of times.",
                "attribution": {
                    "author": "Charles Dickens",
                    "title": "A Tale of Two Cities",
                    "publisher": None,
                    "isbn": None,
                    "publication_date": None,
                    "source_url": None,
                    "content_type": "book",
                },
                "training_metadata": {
                    "character_count": 52,
                    "token_count": 13,
                    "processing_status": "ready_for_training",
                    "weighting": 1,
                },
                "version": 1,
            }
        }
