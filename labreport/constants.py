"""
Centralized constants for lab report parsing and the processed table schemas.
These constants are imported by the parser, the ingestion script and the tests
so that vocabularies and schemas are consistent and not guessed in multiple places.
"""
from __future__ import annotations

from typing import List, Tuple

# Section headers recognized when no vocabulary is configured.
# Order matters: when two headers start at the same offset the earlier one wins.
DEFAULT_SECTION_VOCABULARY: Tuple[str, ...] = (
    "CBC With Differential/Platelet",
    "Comp. Metabolic Panel (14)",
    "Lipid Panel",
    "Testosterone",
    "Iron",
    "Ferritin",
    "Apolipoprotein B",
    "Hemoglobin A1C",
    "Thyroid Panel",
    "Vitamin D",
    "Vitamin B12",
    "Folate",
    "PSA",
    "CRP",
    "ESR",
    "Urinalysis",
    "Microalbumin",
    "Magnesium",
    "Phosphorus",
    "Uric Acid",
)

# Environment variables
SECTIONS_FILE_ENV: str = "LAB_SECTIONS_FILE"
DATE_FORMAT_ENV: str = "LAB_DATE_FORMAT"

# Slash dates are day-first unless configured otherwise
DEFAULT_DATE_FORMAT: str = "%d/%m/%Y"

# Table header detection: a line naming "Test" plus one of these columns
TABLE_HEADER_TOKEN: str = "Test"
TABLE_HEADER_COLUMNS: Tuple[str, ...] = ("Result", "Value", "Units", "Reference")

# Lines carrying this phrase (any case) are dropped before classification
SKIP_LINE_PHRASE: str = "previous results"

# Processed table schemas
# One row per parsed report
LAB_REPORTS_COLS: List[str] = [
    "report_id",
    "specimen_id",
    "collection_date",
    "section_count",
    "warning_count",
    "source",
]

# One row per section, in report order
LAB_SECTIONS_COLS: List[str] = [
    "report_id",
    "position",
    "name",
    "type",
    "content",
    "source",
]

# One row per Result; the seven result fields plus provenance
LAB_RESULTS_COLS: List[str] = [
    "report_id",
    "section",
    "test_name",
    "current_result",
    "flag",
    "previous_result",
    "previous_date",
    "units",
    "reference_interval",
    "collection_date",
    "source",
]

LAB_REPORTS_TABLE_FILE: str = "lab_reports.parquet"
LAB_SECTIONS_TABLE_FILE: str = "lab_sections.parquet"
LAB_RESULTS_TABLE_FILE: str = "lab_results.parquet"
LABS_CORPUS_FILE: str = "labs_corpus.parquet"
