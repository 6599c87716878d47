import os

import fitz  # PyMuPDF
import pandas as pd
import pytest

from labreport.constants import (
    LAB_REPORTS_TABLE_FILE,
    LAB_RESULTS_TABLE_FILE,
    LAB_SECTIONS_TABLE_FILE,
    LABS_CORPUS_FILE,
)
from labreport.ingestion import ingest_labs
from labreport.ingestion.utils_pdf import extract_pdf_pages, pages_to_document

REPORT_PAGE_1 = (
    "Specimen ID: 24-063-1234-0\n"
    "Collection Date: 03/02/2024\n"
    "Comp. Metabolic Panel (14)\n"
    "Test Current Result and Flag Previous Result and Date Units Reference Interval\n"
    "Glucose 102 H 95 15/08/2023 mg/dL 70-99\n"
    "BUN 14 mg/dL 6-24\n"
)
REPORT_PAGE_2 = (
    "Lipid Panel\n"
    "Test Result Units Reference\n"
    "LDL 130 H mg/dL 0-99\n"
)


def write_pdf(path, pages):
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text, fontsize=9)
    doc.save(str(path))
    doc.close()


def test_pages_to_document_joins_in_order():
    pages = [{"page": 1, "text": "a"}, {"page": 2, "text": "b"}]
    assert pages_to_document(pages) == "a\nb"


@pytest.mark.pdf
def test_extract_pdf_pages(tmp_path):
    fp = tmp_path / "labcorp_report.pdf"
    write_pdf(fp, [REPORT_PAGE_1, REPORT_PAGE_2])
    pages = extract_pdf_pages(str(fp))
    assert [p["page"] for p in pages] == [1, 2]
    assert "Glucose" in pages[0]["text"]
    assert "Lipid Panel" in pages[1]["text"]


@pytest.mark.pdf
def test_ingest_writes_tables(tmp_path):
    src = tmp_path / "raw"
    out = tmp_path / "processed"
    src.mkdir()
    write_pdf(src / "labcorp_report.pdf", [REPORT_PAGE_1, REPORT_PAGE_2])
    (src / "notes.txt").write_text("not a pdf")

    assert ingest_labs.main(str(src), str(out)) == 1

    for rel in [
        os.path.join("tables", LAB_REPORTS_TABLE_FILE),
        os.path.join("tables", LAB_SECTIONS_TABLE_FILE),
        os.path.join("tables", LAB_RESULTS_TABLE_FILE),
        os.path.join("corpus", LABS_CORPUS_FILE),
    ]:
        assert (out / rel).exists(), f"missing {rel}"

    reports = pd.read_parquet(out / "tables" / LAB_REPORTS_TABLE_FILE)
    assert reports.iloc[0]["specimen_id"] == "24-063-1234-0"
    assert reports.iloc[0]["collection_date"] == "2024-02-03"

    results = pd.read_parquet(out / "tables" / LAB_RESULTS_TABLE_FILE)
    by_name = {r["test_name"]: r for _, r in results.iterrows()}
    assert by_name["Glucose"]["current_result"] == "102"
    assert by_name["Glucose"]["flag"] == "high"
    assert by_name["LDL"]["section"] == "Lipid Panel"

    corpus = pd.read_parquet(out / "corpus" / LABS_CORPUS_FILE)
    assert len(corpus) == 2


@pytest.mark.pdf
def test_ingest_with_vocabulary_file(tmp_path):
    src = tmp_path / "raw"
    out = tmp_path / "processed"
    src.mkdir()
    write_pdf(src / "report.pdf", [REPORT_PAGE_1, REPORT_PAGE_2])
    vocab = tmp_path / "sections.txt"
    vocab.write_text("Lipid Panel\n")

    assert ingest_labs.main(str(src), str(out), str(vocab)) == 1
    sections = pd.read_parquet(out / "tables" / LAB_SECTIONS_TABLE_FILE)
    assert sections["name"].tolist() == ["Lipid Panel"]


def test_ingest_empty_directory(tmp_path):
    out = tmp_path / "processed"
    assert ingest_labs.main(str(tmp_path), str(out)) == 0
    assert (out / "tables").is_dir()
    assert not (out / "tables" / LAB_RESULTS_TABLE_FILE).exists()


def test_cli_rejects_unsupported_env_date_format(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("LAB_DATE_FORMAT", "%Y/%m/%d")
    out = tmp_path / "processed"
    with pytest.raises(SystemExit) as exc:
        ingest_labs.cli(["--src", str(tmp_path), "--out", str(out)])
    assert exc.value.code == 2
    assert "LAB_DATE_FORMAT" in capsys.readouterr().err
    assert not out.exists()


def test_cli_rejects_unsupported_date_format_option(tmp_path):
    with pytest.raises(SystemExit) as exc:
        ingest_labs.cli(["--src", str(tmp_path), "--out", str(tmp_path / "out"), "--date-format", "%Y-%m-%d"])
    assert exc.value.code == 2


def test_cli_rejects_missing_vocabulary_file(tmp_path):
    out = tmp_path / "processed"
    with pytest.raises(SystemExit) as exc:
        ingest_labs.cli(["--src", str(tmp_path), "--out", str(out), "--vocabulary", str(tmp_path / "nope.txt")])
    assert exc.value.code == 2
    assert not out.exists()


def test_cli_month_first_date_format(tmp_path):
    src = tmp_path / "raw"
    out = tmp_path / "processed"
    src.mkdir()
    write_pdf(src / "report.pdf", [REPORT_PAGE_1, REPORT_PAGE_2])
    assert ingest_labs.cli(["--src", str(src), "--out", str(out), "--date-format", "%m/%d/%Y"]) == 1
    assert (out / "tables" / LAB_REPORTS_TABLE_FILE).exists()


def test_main_checks_date_format_before_writing(tmp_path):
    out = tmp_path / "processed"
    with pytest.raises(ValueError):
        ingest_labs.main(str(tmp_path), str(out), date_format="%Y/%m/%d")
    assert not out.exists()


def main(argv=None):
    import sys
    import pytest as _pytest
    from pathlib import Path as _Path
    test_path = str(_Path(__file__).resolve())
    opts = [test_path]
    rc = _pytest.main(opts if argv is None else argv + [test_path])
    sys.exit(rc)


if __name__ == "__main__":
    main()
