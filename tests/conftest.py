import sys
from datetime import datetime, timezone
from pathlib import Path
import pytest

# Ensure project root is on sys.path so `import labreport...` works when running pytest from repo root
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Load environment variables if present
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolate_parser_env(monkeypatch):
    # A local .env must not change the parser defaults under test
    monkeypatch.delenv("LAB_SECTIONS_FILE", raising=False)
    monkeypatch.delenv("LAB_DATE_FORMAT", raising=False)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def sample_text():
    return (FIXTURES_DIR / "labcorp_sample.txt").read_text(encoding="utf-8")


# Pytest configuration: enable PDF round-trip tests by default; allow disabling with --no-pdf
def pytest_addoption(parser):
    parser.addoption(
        "--no-pdf",
        action="store_true",
        default=False,
        help="Disable tests that build and read PDFs with PyMuPDF (enabled by default)",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "pdf: marks tests that write and read PDF files")


def pytest_collection_modifyitems(config, items):
    if not items:
        return
    if config.getoption("--no-pdf"):
        skip_pdf = pytest.mark.skip(reason="pdf tests disabled via --no-pdf")
        for item in items:
            if item.get_closest_marker("pdf") is not None:
                item.add_marker(skip_pdf)
