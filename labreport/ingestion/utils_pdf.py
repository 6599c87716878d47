import fitz  # PyMuPDF
from typing import List, Dict


def extract_pdf_pages(pdf_path: str) -> List[Dict]:
    """Extract text by page with basic metadata."""
    out = []
    with fitz.open(pdf_path) as doc:
        for i, page in enumerate(doc, start=1):
            text = page.get_text("text") or ""
            out.append({"page": i, "text": text})
    return out


def pages_to_document(pages: List[Dict]) -> str:
    # Sections can run across page breaks, so the parser sees one continuous text
    return "\n".join(p.get("text", "") for p in pages)
