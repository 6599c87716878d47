from labreport.parsing import Report, parse_report

__version__ = "0.1.0"

__all__ = ["Report", "parse_report", "__version__"]
