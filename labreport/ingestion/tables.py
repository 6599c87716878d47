"""
Flatten parsed Reports into the processed table schemas (see labreport.constants):
one row per report, one per section and one per result.
"""
from __future__ import annotations

import hashlib
import json
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from labreport.constants import LAB_REPORTS_COLS, LAB_RESULTS_COLS, LAB_SECTIONS_COLS
from labreport.parsing.models import Report, TableSection


def report_id(report: Report, source: Optional[str] = None) -> str:
    """Stable id derived from the report content and its source path."""
    payload = json.dumps({"source": source, "report": report.to_dict()}, sort_keys=True)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]


def report_rows(report: Report, source: Optional[str] = None) -> Tuple[Dict, List[Dict], List[Dict]]:
    rid = report_id(report, source)
    report_row = {
        "report_id": rid,
        "specimen_id": report.specimen_id,
        "collection_date": report.collection_date,
        "section_count": len(report.sections),
        "warning_count": len(report.warnings),
        "source": source,
    }
    section_rows: List[Dict] = []
    result_rows: List[Dict] = []
    for pos, (name, section) in enumerate(report.sections.items()):
        section_rows.append({
            "report_id": rid,
            "position": pos,
            "name": name,
            "type": section.kind,
            "content": None if isinstance(section, TableSection) else section.content,
            "source": source,
        })
        if isinstance(section, TableSection):
            for r in section.results:
                row = r.to_dict()
                row.update({
                    "report_id": rid,
                    "section": name,
                    "collection_date": report.collection_date,
                    "source": source,
                })
                result_rows.append(row)
    return report_row, section_rows, result_rows


def _frame(rows: List[Dict], cols: List[str]) -> pd.DataFrame:
    df = pd.DataFrame(rows)
    # Ensure columns exist even for empty tables or sparse rows
    for col in cols:
        if col not in df.columns:
            df[col] = None
    return df[cols]


def reports_to_frames(reports: Iterable[Tuple[Report, Optional[str]]]) -> Dict[str, pd.DataFrame]:
    """Build the reports/sections/results DataFrames for (report, source) pairs."""
    all_reports: List[Dict] = []
    all_sections: List[Dict] = []
    all_results: List[Dict] = []
    for report, source in reports:
        rep, secs, res = report_rows(report, source)
        all_reports.append(rep)
        all_sections.extend(secs)
        all_results.extend(res)
    return {
        "reports": _frame(all_reports, LAB_REPORTS_COLS),
        "sections": _frame(all_sections, LAB_SECTIONS_COLS),
        "results": _frame(all_results, LAB_RESULTS_COLS),
    }


def report_frames(report: Report, source: Optional[str] = None) -> Dict[str, pd.DataFrame]:
    return reports_to_frames([(report, source)])
