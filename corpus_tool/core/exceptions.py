"""
Error taxonomy for the corpus tool.

Every error carries the HTTP status it maps to, so the API layer can render
all of them the same way.
"""


class CorpusError(Exception):
    """Base class for corpus tool errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CorpusError):
    """A required field is missing or empty, or a value is malformed."""

    status_code = 400


class DuplicateDocumentError(CorpusError):
    """The document conflicts with one already in the corpus."""

    status_code = 409


class DuplicateIdError(DuplicateDocumentError):
    """A record with the same document_id already exists."""

    def __init__(self, document_id: str):
        super().__init__(f"Document with ID '{document_id}' already exists in corpus")
        self.document_id = document_id


class DuplicateContentError(DuplicateDocumentError):
    """A record with the same title, author and opening text already exists."""

    def __init__(self, title: str, author: str):
        super().__init__(
            f"Similar content already exists in corpus: '{title}' by {author}"
        )
        self.title = title
        self.author = author


class StoreUnavailableError(CorpusError):
    """The document store could not be reached or an I/O call failed."""

    status_code = 503
