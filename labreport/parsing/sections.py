import logging
from typing import Iterator, List, NamedTuple, Optional, Sequence

from labreport.constants import (
    DEFAULT_DATE_FORMAT,
    SKIP_LINE_PHRASE,
    TABLE_HEADER_COLUMNS,
    TABLE_HEADER_TOKEN,
)
from labreport.parsing.models import (
    ParseWarning,
    Result,
    Section,
    TableSection,
    TextSection,
    UnparseableRow,
    WarningCode,
)
from labreport.parsing.rows import tokenize_row

logger = logging.getLogger(__name__)


class SectionSpan(NamedTuple):
    name: str
    start: int
    end: int


def _first_header(text: str, vocabulary: Sequence[str], from_offset: int):
    """Earliest (offset, header) at or after from_offset. Ties keep declaration order."""
    best_pos = len(text)
    best_name: Optional[str] = None
    for header in vocabulary:
        pos = text.find(header, from_offset)
        if pos != -1 and pos < best_pos:
            best_pos, best_name = pos, header
    return best_pos, best_name


def locate(text: str, vocabulary: Sequence[str], from_offset: int = 0) -> Optional[SectionSpan]:
    """
    Find the next known section header at or after `from_offset`.

    The span runs from that header up to the next occurrence of any header
    (not necessarily the same one) or to the end of the text. Headers are
    plain case-sensitive substrings; one quoted mid-sentence still counts.
    """
    start, name = _first_header(text, vocabulary, from_offset)
    if name is None:
        return None
    end, _ = _first_header(text, vocabulary, start + 1)
    return SectionSpan(name, start, end)


def iter_sections(text: str, vocabulary: Sequence[str]) -> Iterator[SectionSpan]:
    """Walk the document header to header. Spans are contiguous and in document order."""
    offset = 0
    while offset < len(text):
        span = locate(text, vocabulary, offset)
        if span is None:
            break
        logger.debug(f"Found section {span.name!r} at [{span.start}, {span.end})")
        yield span
        offset = span.end


def is_table_header(line: str) -> bool:
    return TABLE_HEADER_TOKEN in line and any(col in line for col in TABLE_HEADER_COLUMNS)


def classify(span_text: str, section_name: str, date_format: str = DEFAULT_DATE_FORMAT) -> Section:
    """
    Turn one section span into a TableSection when it carries a table header
    line ("Test" plus Result/Value/Units/Reference), else a TextSection with
    the trimmed span as content.
    """
    lines = [
        ln for ln in span_text.splitlines()
        if ln.strip() and SKIP_LINE_PHRASE not in ln.lower()
    ]
    header_idx = next((i for i, ln in enumerate(lines) if is_table_header(ln)), None)
    if header_idx is None:
        logger.debug(f"Section {section_name!r} has no table header; keeping as text")
        return TextSection(name=section_name, content=span_text.strip())

    results: List[Result] = []
    unparsed: List[str] = []
    warnings: List[ParseWarning] = []
    for ln in lines[header_idx + 1:]:
        row = tokenize_row(ln, date_format)
        if isinstance(row, UnparseableRow):
            logger.warning(f"Unreadable row in {section_name!r}: {row.line.strip()!r}")
            unparsed.append(row.line.strip())
            warnings.append(ParseWarning(
                code=WarningCode.MALFORMED_ROW,
                message=f"No numeric result found in row {row.line.strip()!r}",
                section=section_name,
                line=row.line,
            ))
            continue
        for w in row.warnings:
            logger.warning(f"{w.message} (section {section_name!r})")
            warnings.append(w.with_section(section_name))
        results.append(row)

    logger.debug(f"Section {section_name!r}: {len(results)} results, {len(unparsed)} unparsed rows")
    return TableSection(
        name=section_name,
        results=tuple(results),
        unparsed=tuple(unparsed),
        warnings=tuple(warnings),
    )
