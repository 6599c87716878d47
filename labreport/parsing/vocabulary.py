import json
import logging
import os
from typing import Iterable, Optional, Tuple

from labreport.constants import DEFAULT_SECTION_VOCABULARY, SECTIONS_FILE_ENV
from labreport.parsing.errors import VocabularyError

logger = logging.getLogger(__name__)


def normalize_vocabulary(headers: Iterable[str]) -> Tuple[str, ...]:
    """Keep declaration order, drop repeats, reject blank headers."""
    out = []
    seen = set()
    for h in headers:
        if not isinstance(h, str) or not h.strip():
            raise VocabularyError(f"Section headers must be non-empty strings, got {h!r}")
        if h in seen:
            continue
        seen.add(h)
        out.append(h)
    return tuple(out)


def read_vocabulary_file(path: str) -> Tuple[str, ...]:
    """
    Read section headers from a file.

    Accepts either a JSON list of strings or plain text with one header per
    line (blank lines and lines starting with '#' are skipped, the rest are
    stripped). Headers are then matched verbatim and case-sensitively.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise VocabularyError(f"Cannot read vocabulary file {path}: {e}") from e

    if raw.lstrip().startswith("["):
        try:
            headers = json.loads(raw)
        except json.JSONDecodeError as e:
            raise VocabularyError(f"Invalid JSON vocabulary in {path}: {e}") from e
        if not isinstance(headers, list):
            raise VocabularyError(f"Vocabulary in {path} must be a JSON list")
    else:
        headers = [ln.strip() for ln in raw.splitlines() if ln.strip() and not ln.lstrip().startswith("#")]
    return normalize_vocabulary(headers)


def load_vocabulary(path: Optional[str] = None) -> Tuple[str, ...]:
    """Headers from `path`, else from $LAB_SECTIONS_FILE, else the built-in defaults."""
    path = path or os.getenv(SECTIONS_FILE_ENV)
    if path:
        vocab = read_vocabulary_file(path)
        logger.info(f"Loaded {len(vocab)} section headers from {path}")
        return vocab
    return DEFAULT_SECTION_VOCABULARY
