class LabParseError(Exception):
    """Base class for errors raised by the lab report parser."""


class EmptyDocumentError(LabParseError, ValueError):
    """The document text is empty or missing; nothing to parse."""


class VocabularyError(LabParseError, ValueError):
    """The section vocabulary is unusable (empty header, unreadable file)."""
