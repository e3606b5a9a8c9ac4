"""
Assemble corpus document records from operator input.
"""
from datetime import datetime
from typing import Optional
import logging
import secrets
import string

from corpus_tool.core.config import settings
from corpus_tool.core.exceptions import ValidationError
from corpus_tool.models import (
    Attribution,
    ContentMetadata,
    CopyrightCompliance,
    DocumentRecord,
    LineageStep,
    OptOutStatus,
    Provenance,
    TrainingMetadata,
    utcnow,
)
from corpus_tool.schemas.document import DocumentFields
from corpus_tool.services.text_normalizer import estimate_tokens, normalize

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9

INITIAL_LINEAGE_STEP = "Manual text input via corpus tool (auto-cleaned)"


def generate_document_id(now: Optional[datetime] = None) -> str:
    """``text_content_<epoch millis>_<9 random base36 chars>``."""
    now = now or utcnow()
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"text_content_{millis}_{suffix}"


def _optional(value: Optional[str]) -> Optional[str]:
    # Empty input means "not provided", never an empty string
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_fields(fields: DocumentFields, cleaned_text: Optional[str] = None) -> None:
    """
    Check the required fields before anything is built or stored.

    Raises ValidationError naming the first missing field.
    """
    if not fields.title.strip():
        raise ValidationError("Please enter a title")
    if not fields.author.strip():
        raise ValidationError("Please enter an author")
    if fields.content_type is None:
        raise ValidationError("Please select a content type")
    text = fields.content_text if cleaned_text is None else cleaned_text
    if not text.strip():
        raise ValidationError("Please enter the content text")


def build_record(
    fields: DocumentFields, cleaned_text: str, now: Optional[datetime] = None
) -> DocumentRecord:
    """
    Build a new document record from validated form fields.

    Counts are derived from ``cleaned_text``, never from the raw input.
    """
    now = now or utcnow()
    character_count = len(cleaned_text)

    return DocumentRecord(
        document_id=generate_document_id(now),
        content_text=cleaned_text,
        attribution=Attribution(
            author=fields.author.strip(),
            title=fields.title.strip(),
            publisher=_optional(fields.publisher),
            isbn=_optional(fields.isbn),
            publication_date=_optional(fields.publication_date),
            source_url=_optional(fields.source_url),
            content_type=fields.content_type,
        ),
        content_metadata=ContentMetadata(
            language=fields.language.strip() or "en-US",
            topic_category=["other"],
            genre=_optional(fields.genre),
            chapter_section=_optional(fields.chapter_section),
            page_numbers=_optional(fields.page_numbers),
        ),
        copyright_compliance=CopyrightCompliance(
            opt_out_status=OptOutStatus(last_checked=now),
            compliance_date=now,
        ),
        provenance=Provenance(
            acquisition_date=now,
            original_publication_date=now,
            data_lineage=[
                LineageStep(
                    step=INITIAL_LINEAGE_STEP,
                    timestamp=now,
                    tool_used=settings.tool_name,
                )
            ],
        ),
        training_metadata=TrainingMetadata(
            character_count=character_count,
            token_count=estimate_tokens(character_count),
            weighting=fields.weighting,
        ),
        created_at=now,
        updated_at=now,
        version=1,
    )


def prepare_record(fields: DocumentFields) -> DocumentRecord:
    """Normalize the pasted text, validate the form and build the record."""
    validate_fields(fields)
    cleaned_text = normalize(fields.content_text)
    validate_fields(fields, cleaned_text)
    record = build_record(fields, cleaned_text)
    logger.info(
        f"Prepared record {record.document_id}: "
        f"{len(fields.content_text)} raw chars -> {len(cleaned_text)} cleaned"
    )
    return record
