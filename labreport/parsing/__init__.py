# Lab report text parser
# Pipeline: sections.locate/iter_sections -> sections.classify -> rows.tokenize_row,
# plus metadata.extract_metadata; report.parse_report ties them into one Report.
from labreport.parsing.errors import EmptyDocumentError, LabParseError, VocabularyError
from labreport.parsing.metadata import Metadata, extract_metadata
from labreport.parsing.models import (
    Flag,
    ParseWarning,
    Report,
    Result,
    Section,
    TableSection,
    TextSection,
    UnparseableRow,
    WarningCode,
)
from labreport.parsing.report import parse_report
from labreport.parsing.rows import format_row, tokenize_row
from labreport.parsing.sections import SectionSpan, classify, iter_sections, locate
from labreport.parsing.vocabulary import load_vocabulary

__all__ = [
    "EmptyDocumentError",
    "LabParseError",
    "VocabularyError",
    "Metadata",
    "extract_metadata",
    "Flag",
    "ParseWarning",
    "Report",
    "Result",
    "Section",
    "TableSection",
    "TextSection",
    "UnparseableRow",
    "WarningCode",
    "parse_report",
    "format_row",
    "tokenize_row",
    "SectionSpan",
    "classify",
    "iter_sections",
    "locate",
    "load_vocabulary",
]
