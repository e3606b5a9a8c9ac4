"""
Data access for the text corpus collection.

Thin wrapper over the motor collection: inserts guarded by duplicate checks,
lookups, merge updates with version tracking, deletes and aggregate stats.
"""
from typing import Any, Dict, List, Optional
import logging
import re

from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from corpus_tool.core.config import settings
from corpus_tool.core.exceptions import (
    DuplicateContentError,
    DuplicateIdError,
    StoreUnavailableError,
    ValidationError,
)
from corpus_tool.core.mongodb import MongoDB, mongodb
from corpus_tool.models import (
    Attribution,
    ContentType,
    DocumentRecord,
    LineageStep,
    TrainingMetadata,
    utcnow,
)
from corpus_tool.services.text_normalizer import estimate_tokens, normalize

logger = logging.getLogger(__name__)

# Length of the opening text compared by the duplicate content check
CONTENT_SIGNATURE_LENGTH = 100

# Paths that only the store itself may change, along with anything below
# them. Provenance holds the append-only lineage; content edits add to it
# through $push.
PROTECTED_PATHS = (
    "_id",
    "document_id",
    "version",
    "created_at",
    "updated_at",
    "provenance",
    "training_metadata.character_count",
    "training_metadata.token_count",
)
REQUIRED_ATTRIBUTION_FIELDS = {"title", "author", "content_type"}

CONTENT_UPDATE_STEP = "Content text updated via corpus tool (auto-cleaned)"

EMPTY_STATS = {
    "totalDocuments": 0,
    "totalCharacters": 0,
    "totalTokens": 0,
    "averageWeight": 0,
    "contentTypes": [],
}


def content_prefix_pattern(content_text: str) -> str:
    """Anchored regex matching text that starts with the given text's opening.

    The prefix is escaped, so it is matched literally.
    """
    return "^" + re.escape(content_text[:CONTENT_SIGNATURE_LENGTH])


def _serialize(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    if "_id" in document:
        document["_id"] = str(document["_id"])
    return document


def _touches(key: str, path: str) -> bool:
    return key == path or key.startswith(path + ".")


def _check_nested_keys(value: Any, key: str) -> None:
    if isinstance(value, dict):
        for name, item in value.items():
            if not isinstance(name, str) or not name or name.startswith("$") or "." in name:
                raise ValidationError(f"Invalid field name under {key}: {name!r}")
            _check_nested_keys(item, key)
    elif isinstance(value, list):
        for item in value:
            _check_nested_keys(item, key)


def _check_patch_keys(patch: Dict[str, Any]) -> None:
    """Reject keys MongoDB would refuse, so they surface as bad input."""
    for key, value in patch.items():
        parts = key.split(".") if isinstance(key, str) else [""]
        if any(not part or part.startswith("$") for part in parts):
            raise ValidationError(f"Invalid field path: {key!r}")
        if parts[0] not in DocumentRecord.model_fields:
            raise ValidationError(f"Unknown field: {parts[0]}")
        if parts[0] == "content_text" and len(parts) > 1:
            raise ValidationError(f"Invalid field path: {key!r}")
        _check_nested_keys(value, key)

    # "a" and "a.b" in one update would conflict
    for key in patch:
        for other in patch:
            if other != key and other.startswith(key + "."):
                raise ValidationError(f"Conflicting fields in update: {key}, {other}")


def _validate_attribution_field(key: str, value: Any) -> Any:
    name = key.split(".", 1)[1]
    if name not in Attribution.model_fields:
        raise ValidationError(f"Unknown attribution field: {name}")
    if name == "content_type":
        try:
            return ContentType(value).value
        except ValueError:
            raise ValidationError(f"Invalid content_type: {value!r}") from None
    if value is None and name not in REQUIRED_ATTRIBUTION_FIELDS:
        return None
    if not isinstance(value, str) or (name in REQUIRED_ATTRIBUTION_FIELDS and not value.strip()):
        raise ValidationError(f"{key} must not be empty")
    return value


class CorpusStore:
    """Gateway to the corpus collection."""

    def __init__(self, db: MongoDB = mongodb):
        self.db = db

    async def connect(self):
        """Connect (once) and return the corpus collection."""
        return await self.db.get_collection()

    async def close(self):
        await self.db.disconnect()

    async def ping(self) -> bool:
        return await self.db.ping()

    async def insert_document(self, record: DocumentRecord) -> str:
        """
        Insert a record after checking for duplicates.

        - DuplicateIdError if the document_id is already stored
        - DuplicateContentError if a record with the same title and author
          starts with the same opening text

        The content check is a best-effort heuristic: it compares a fixed
        window of the new text against the stored text as-is. The unique
        index on document_id remains the real guard against concurrent
        inserts.
        """
        collection = await self.connect()
        document = record.model_dump()
        training = document["training_metadata"]
        training["character_count"] = len(document["content_text"])
        training["token_count"] = estimate_tokens(training["character_count"])

        try:
            existing = await collection.find_one({"document_id": record.document_id})
            if existing:
                logger.info(f"Rejected duplicate document_id {record.document_id}")
                raise DuplicateIdError(record.document_id)

            content_signature = {
                "attribution.title": record.attribution.title,
                "attribution.author": record.attribution.author,
                "content_text": {"$regex": content_prefix_pattern(record.content_text)},
            }
            if await collection.find_one(content_signature):
                logger.info(
                    f"Rejected similar content for '{record.attribution.title}' "
                    f"by {record.attribution.author}"
                )
                raise DuplicateContentError(record.attribution.title, record.attribution.author)

            result = await collection.insert_one(document)
        except DuplicateKeyError as e:
            raise DuplicateIdError(record.document_id) from e
        except PyMongoError as e:
            raise StoreUnavailableError(f"Failed to insert document: {e}") from e

        logger.info(
            f"Inserted document: {record.attribution.title} by {record.attribution.author}"
        )
        return str(result.inserted_id)

    async def find_documents(
        self, query: Optional[Dict[str, Any]] = None, limit: int = settings.default_page_size
    ) -> List[Dict[str, Any]]:
        """Return up to ``limit`` records matching ``query`` in natural order."""
        collection = await self.connect()
        try:
            cursor = collection.find(query or {}).limit(limit)
            documents = await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise StoreUnavailableError(f"Failed to fetch documents: {e}") from e
        return [_serialize(doc) for doc in documents]

    async def get_document_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Get a record by document_id, or None when it does not exist."""
        collection = await self.connect()
        try:
            document = await collection.find_one({"document_id": document_id})
        except PyMongoError as e:
            raise StoreUnavailableError(f"Failed to fetch document: {e}") from e
        return _serialize(document)

    async def update_document(
        self, document_id: str, patch: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Merge ``patch`` into a stored record.

        updated_at is set and version incremented in the same update. A new
        content_text is normalized, its counts recomputed and a lineage step
        appended. Returns the updated record, or None if it does not exist.
        """
        update = self._build_update(patch)
        collection = await self.connect()
        try:
            document = await collection.find_one_and_update(
                {"document_id": document_id},
                update,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StoreUnavailableError(f"Failed to update document: {e}") from e

        if document is None:
            return None
        logger.info(f"Updated document {document_id} to version {document.get('version')}")
        return _serialize(document)

    @staticmethod
    def _build_update(patch: Dict[str, Any]) -> Dict[str, Any]:
        if not patch:
            raise ValidationError("Update must change at least one field")
        patch = dict(patch)

        _check_patch_keys(patch)

        protected = sorted(
            key for key in patch if any(_touches(key, field) for field in PROTECTED_PATHS)
        )
        if protected:
            raise ValidationError(f"Fields cannot be updated: {', '.join(protected)}")

        for key in [k for k in patch if k.startswith("attribution.")]:
            patch[key] = _validate_attribution_field(key, patch[key])
        if "attribution" in patch:
            try:
                patch["attribution"] = Attribution.model_validate(patch["attribution"]).model_dump()
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid attribution: {e}") from e

        if "training_metadata" in patch and "content_text" not in patch:
            raise ValidationError(
                "training_metadata can only be replaced together with content_text; "
                "use training_metadata.weighting or training_metadata.processing_status"
            )

        now = utcnow()
        values = patch
        values["updated_at"] = now
        update: Dict[str, Any] = {"$set": values, "$inc": {"version": 1}}

        if "content_text" in values:
            cleaned = normalize(values["content_text"])
            if not cleaned:
                raise ValidationError("Please enter the content text")
            values["content_text"] = cleaned
            counts = {
                "character_count": len(cleaned),
                "token_count": estimate_tokens(len(cleaned)),
            }
            if "training_metadata" in values:
                if not isinstance(values["training_metadata"], dict):
                    raise ValidationError("training_metadata must be an object")
                try:
                    values["training_metadata"] = TrainingMetadata.model_validate(
                        {**values["training_metadata"], **counts}
                    ).model_dump()
                except PydanticValidationError as e:
                    raise ValidationError(f"Invalid training_metadata: {e}") from e
            else:
                for key, value in counts.items():
                    values[f"training_metadata.{key}"] = value
            step = LineageStep(step=CONTENT_UPDATE_STEP, timestamp=now, tool_used=settings.tool_name)
            update["$push"] = {"provenance.data_lineage": step.model_dump()}

        return update

    async def delete_document(self, document_id: str) -> int:
        """Delete a record. Deleting a missing record is not an error."""
        collection = await self.connect()
        try:
            result = await collection.delete_one({"document_id": document_id})
        except PyMongoError as e:
            raise StoreUnavailableError(f"Failed to delete document: {e}") from e
        if result.deleted_count:
            logger.info(f"Deleted document {document_id}")
        return result.deleted_count

    async def get_collection_stats(self) -> Dict[str, Any]:
        """Totals over the whole collection; all zero when it is empty."""
        collection = await self.connect()
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "totalDocuments": {"$sum": 1},
                    "totalCharacters": {"$sum": "$training_metadata.character_count"},
                    "totalTokens": {"$sum": "$training_metadata.token_count"},
                    "averageWeight": {"$avg": "$training_metadata.weighting"},
                    "contentTypes": {"$addToSet": "$attribution.content_type"},
                }
            }
        ]
        try:
            results = await collection.aggregate(pipeline).to_list(length=1)
        except PyMongoError as e:
            raise StoreUnavailableError(f"Failed to fetch collection statistics: {e}") from e

        if not results:
            return dict(EMPTY_STATS, contentTypes=[])
        stats = results[0]
        stats.pop("_id", None)
        stats["averageWeight"] = stats.get("averageWeight") or 0
        stats["contentTypes"] = sorted(t for t in stats.get("contentTypes", []) if t)
        return stats


# Global store instance
corpus_store = CorpusStore()


def get_corpus_store() -> CorpusStore:
    """FastAPI dependency returning the shared store."""
    return corpus_store
