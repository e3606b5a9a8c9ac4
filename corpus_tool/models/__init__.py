"""Record models stored in MongoDB."""
from .document_record import (
    AiActCompliance,
    Attribution,
    ContentMetadata,
    ContentType,
    CopyrightCompliance,
    DocumentRecord,
    LineageStep,
    OptOutStatus,
    Provenance,
    TrainingMetadata,
    utcnow,
)

__all__ = [
    "AiActCompliance",
    "Attribution",
    "ContentMetadata",
    "ContentType",
    "CopyrightCompliance",
    "DocumentRecord",
    "LineageStep",
    "OptOutStatus",
    "Provenance",
    "TrainingMetadata",
    "utcnow",
]
