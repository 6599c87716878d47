# Batch ingestion around the parser
# - utils_pdf: page text from lab PDFs (PyMuPDF)
# - tables: Reports -> pandas DataFrames (reports / sections / results)
# - ingest_labs: CLI, PDFs in, parquet tables out
