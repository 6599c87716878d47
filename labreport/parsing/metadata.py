import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from labreport.constants import DEFAULT_DATE_FORMAT
from labreport.parsing.dates import format_timestamp, parse_slash_date
from labreport.parsing.models import ParseWarning, WarningCode

logger = logging.getLogger(__name__)

SPECIMEN_ID_RE = re.compile(r"(Specimen|Sample)\s+ID:\s*([A-Za-z0-9-]+)", re.IGNORECASE)
COLLECTION_DATE_RE = re.compile(r"(Collection|Drawn|Sample)\s+Date:\s*(\d{1,2}/\d{1,2}/\d{4})", re.IGNORECASE)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Metadata:
    collection_date: str
    specimen_id: Optional[str] = None
    warnings: Tuple[ParseWarning, ...] = ()


def extract_specimen_id(document: str) -> Optional[str]:
    m = SPECIMEN_ID_RE.search(document)
    return m.group(2) if m else None


def extract_metadata(
    document: str,
    clock: Optional[Clock] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> Metadata:
    """
    Scan the whole document for the specimen/sample ID and the collection date.

    A missing collection date is not an error: it defaults to the clock time
    (UTC now unless a clock is injected).
    """
    specimen_id = extract_specimen_id(document)
    warnings = []

    collection_date: Optional[str] = None
    m = COLLECTION_DATE_RE.search(document)
    if m:
        collection_date, exact = parse_slash_date(m.group(2), date_format)
        if not exact:
            logger.warning(f"Collection date {m.group(2)!r} is not a valid date; read as {collection_date}")
            warnings.append(ParseWarning(
                code=WarningCode.AMBIGUOUS_DATE,
                message=f"Collection date {m.group(2)!r} is not a valid date",
                line=m.group(0),
            ))

    if collection_date is None:
        collection_date = format_timestamp((clock or utc_now)())
        logger.debug(f"No collection date in document; defaulting to {collection_date}")

    return Metadata(collection_date=collection_date, specimen_id=specimen_id, warnings=tuple(warnings))
