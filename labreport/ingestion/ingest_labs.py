import argparse
import os
import glob
from typing import List, Dict, Optional, Tuple
import pandas as pd
from datetime import datetime, timezone
import logging

from dotenv import load_dotenv

from labreport.constants import (
    LAB_REPORTS_TABLE_FILE,
    LAB_SECTIONS_TABLE_FILE,
    LAB_RESULTS_TABLE_FILE,
    LABS_CORPUS_FILE,
)
from labreport.ingestion.tables import reports_to_frames
from labreport.ingestion.utils_pdf import extract_pdf_pages, pages_to_document
from labreport.parsing import LabParseError, Report, VocabularyError, load_vocabulary, parse_report
from labreport.parsing.dates import SUPPORTED_FORMATS, check_date_format, configured_date_format

logger = logging.getLogger(__name__)


def ensure_dirs(base_out: str):
    os.makedirs(os.path.join(base_out, "tables"), exist_ok=True)
    os.makedirs(os.path.join(base_out, "corpus"), exist_ok=True)


def main(src: str, out: str, vocabulary_file: Optional[str] = None, date_format: Optional[str] = None) -> int:
    """
    Parse every PDF under `src` and write parquet tables under `out`. Returns the number of parsed reports.

    The vocabulary and date format are resolved once, before any file is read, so a bad
    setting fails the run up front (VocabularyError / ValueError) instead of once per file.
    """
    vocabulary = load_vocabulary(vocabulary_file)
    date_format = check_date_format(date_format) if date_format else configured_date_format()
    ensure_dirs(out)
    corpus_rows: List[Dict] = []
    parsed: List[Tuple[Report, str]] = []

    for fp in sorted(glob.glob(os.path.join(src, "*.pdf"))):
        source = os.path.relpath(fp)
        try:
            pages = extract_pdf_pages(fp)
        except Exception as e:
            logger.error(f"Failed to read {fp}: {e}")
            continue
        for p in pages:
            corpus_rows.append({
                "text": p.get("text", ""),
                "source": source,
                "page": p.get("page"),
                "source_type": "labs",
                "ingested_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            })

        try:
            report = parse_report(pages_to_document(pages), vocabulary, date_format=date_format)
        except LabParseError as e:
            logger.error(f"Failed to parse {fp}: {e}")
            continue
        if report.has_warnings:
            logger.warning(f"{source}: {report.advisory()}")
        parsed.append((report, source))

    if corpus_rows:
        df = pd.DataFrame(corpus_rows)
        df.to_parquet(os.path.join(out, "corpus", LABS_CORPUS_FILE))
        logger.info(f"Wrote corpus: {len(df)} rows")
    else:
        logger.warning("No lab PDFs found or text extracted.")

    if parsed:
        frames = reports_to_frames(parsed)
        frames["reports"].to_parquet(os.path.join(out, "tables", LAB_REPORTS_TABLE_FILE))
        frames["sections"].to_parquet(os.path.join(out, "tables", LAB_SECTIONS_TABLE_FILE))
        frames["results"].to_parquet(os.path.join(out, "tables", LAB_RESULTS_TABLE_FILE))
        logger.info(
            f"Wrote lab tables: {len(frames['reports'])} reports, "
            f"{len(frames['sections'])} sections, {len(frames['results'])} results"
        )
    else:
        logger.warning("No lab reports parsed.")
    return len(parsed)


def cli(argv=None):
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    parser = argparse.ArgumentParser(description="Parse lab report PDFs into parquet tables")
    default_src = os.path.join(os.getenv("DATA_DIR", "./data/raw"), "labs")
    parser.add_argument("--src", default=default_src)
    parser.add_argument("--out", default=os.getenv("PROCESSED_DIR", "./data/processed"))
    parser.add_argument("--vocabulary", default=None, help="Section header file (JSON list or one per line)")
    parser.add_argument("--date-format", default=None, choices=SUPPORTED_FORMATS, help="Slash date order (default: $LAB_DATE_FORMAT or %%d/%%m/%%Y)")
    args = parser.parse_args(argv)
    # Bad settings are usage errors, reported before any PDF is touched
    try:
        date_format = args.date_format or configured_date_format()
        load_vocabulary(args.vocabulary)
    except (VocabularyError, ValueError) as e:
        parser.error(str(e))
    return main(args.src, args.out, args.vocabulary, date_format)


if __name__ == "__main__":
    cli()
