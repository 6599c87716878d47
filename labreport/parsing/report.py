import logging
from typing import Dict, List, Optional, Sequence

from labreport.parsing.dates import check_date_format, configured_date_format
from labreport.parsing.errors import EmptyDocumentError
from labreport.parsing.metadata import Clock, extract_metadata
from labreport.parsing.models import ParseWarning, Report, Section, WarningCode
from labreport.parsing.sections import classify, iter_sections
from labreport.parsing.vocabulary import load_vocabulary, normalize_vocabulary

logger = logging.getLogger(__name__)


def parse_report(
    document: str,
    vocabulary: Optional[Sequence[str]] = None,
    *,
    clock: Optional[Clock] = None,
    date_format: Optional[str] = None,
) -> Report:
    """
    Parse extracted lab report text into a Report.

    Args:
        document: Full report text. Empty or blank text raises EmptyDocumentError.
        vocabulary: Ordered section headers. None loads the configured vocabulary.
        clock: Time source for the collection date fallback (defaults to UTC now).
        date_format: strptime format for slash dates (defaults to $LAB_DATE_FORMAT or %d/%m/%Y).

    Bad rows and dates never abort the parse; they are reported in Report.warnings.
    A repeated section name replaces the earlier section.
    """
    if not isinstance(document, str) or not document.strip():
        raise EmptyDocumentError("Lab report text is empty")

    vocab = load_vocabulary() if vocabulary is None else normalize_vocabulary(vocabulary)
    fmt = check_date_format(date_format) if date_format else configured_date_format()

    sections: Dict[str, Section] = {}
    warnings: List[ParseWarning] = []
    for span in iter_sections(document, vocab):
        section = classify(document[span.start:span.end], span.name, fmt)
        if span.name in sections:
            logger.warning(f"Section {span.name!r} appears again at offset {span.start}; replacing earlier section")
            warnings.append(ParseWarning(
                code=WarningCode.DUPLICATE_SECTION,
                message=f"Section {span.name!r} appears more than once; the last occurrence was kept",
                section=span.name,
            ))
        # A replaced section keeps the map position of its first occurrence
        sections[span.name] = section

    if not sections:
        logger.warning("No known section headers found in lab report")
        warnings.append(ParseWarning(
            code=WarningCode.NO_HEADERS_FOUND,
            message="None of the configured section headers appear in the document",
        ))

    meta = extract_metadata(document, clock=clock, date_format=fmt)
    for section in sections.values():
        warnings.extend(section.warnings)

    report = Report(
        collection_date=meta.collection_date,
        sections=sections,
        specimen_id=meta.specimen_id,
        warnings=tuple(meta.warnings) + tuple(warnings),
    )
    logger.info(f"Parsed lab report: {len(sections)} sections, {len(report.results())} results, {len(report.warnings)} warnings")
    return report
