from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple, Union


class Flag(str, Enum):
    HIGH = "high"
    LOW = "low"


class WarningCode(str, Enum):
    MALFORMED_ROW = "MalformedRow"
    AMBIGUOUS_DATE = "AmbiguousDate"
    NO_HEADERS_FOUND = "NoHeadersFound"
    DUPLICATE_SECTION = "DuplicateSection"


@dataclass(frozen=True)
class ParseWarning:
    """A non-fatal problem found while parsing; the report is still usable."""

    code: WarningCode
    message: str
    section: Optional[str] = None
    line: Optional[str] = None

    def with_section(self, section: str) -> "ParseWarning":
        return replace(self, section=section)

    def to_dict(self) -> Dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "section": self.section,
            "line": self.line,
        }


@dataclass(frozen=True)
class Result:
    """One parsed test row of a tabular section."""

    test_name: str
    current_result: str
    flag: Optional[Flag] = None
    previous_result: Optional[str] = None
    previous_date: Optional[str] = None  # ISO date
    units: Optional[str] = None
    reference_interval: Optional[str] = None
    # Row-level problems (e.g. an impossible previous date); not part of the value
    warnings: Tuple[ParseWarning, ...] = field(default=(), compare=False, repr=False)

    def to_dict(self) -> Dict:
        return {
            "test_name": self.test_name,
            "current_result": self.current_result,
            "flag": self.flag.value if self.flag else None,
            "previous_result": self.previous_result,
            "previous_date": self.previous_date,
            "units": self.units,
            "reference_interval": self.reference_interval,
        }


@dataclass(frozen=True)
class UnparseableRow:
    """A table line with no numeric-shaped token. The raw line is kept for display."""

    line: str


@dataclass(frozen=True)
class TextSection:
    name: str
    content: str
    kind: str = field(default="text", init=False)

    @property
    def warnings(self) -> Tuple[ParseWarning, ...]:
        return ()

    def to_dict(self) -> Dict:
        return {"name": self.name, "type": self.kind, "content": self.content}


@dataclass(frozen=True)
class TableSection:
    name: str
    results: Tuple[Result, ...] = ()
    unparsed: Tuple[str, ...] = ()
    warnings: Tuple[ParseWarning, ...] = ()
    kind: str = field(default="table", init=False)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "type": self.kind,
            "results": [r.to_dict() for r in self.results],
            "unparsed": list(self.unparsed),
        }


Section = Union[TextSection, TableSection]


class SectionMap(dict):
    """
    Read-only name -> Section mapping in discovery order.

    A plain dict underneath, so reports pickle, deep-copy and go through
    dataclasses.asdict; every mutating method raises TypeError.
    """

    def _read_only(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only; use Report.replace_section")

    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only

    def __reduce__(self):
        return (type(self), (dict(self),))

    def __hash__(self):
        return hash(tuple(self.items()))


@dataclass(frozen=True)
class Report:
    """
    Top-level parse output: metadata plus sections keyed by name, in discovery order.

    Reports are immutable. `sections` is exposed as a read-only mapping; use
    `replace_section` to derive a corrected report.
    """

    collection_date: str
    sections: Mapping[str, Section] = field(default_factory=dict)
    specimen_id: Optional[str] = None
    warnings: Tuple[ParseWarning, ...] = ()

    def __post_init__(self):
        if not isinstance(self.sections, SectionMap):
            object.__setattr__(self, "sections", SectionMap(self.sections))

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def results(self) -> List[Tuple[str, Result]]:
        """All results as (section name, result) pairs, in report order."""
        out: List[Tuple[str, Result]] = []
        for name, section in self.sections.items():
            if isinstance(section, TableSection):
                out.extend((name, r) for r in section.results)
        return out

    def replace_section(self, section: Section) -> "Report":
        sections = dict(self.sections)
        sections[section.name] = section
        return replace(self, sections=sections)

    def advisory(self) -> Optional[str]:
        """Aggregate warnings into one user-facing message, or None if there are none."""
        if not self.warnings:
            return None
        counts: Dict[WarningCode, int] = {}
        for w in self.warnings:
            counts[w.code] = counts.get(w.code, 0) + 1
        parts = []
        if WarningCode.NO_HEADERS_FOUND in counts:
            parts.append("no known sections were found; results may need manual entry")
        if WarningCode.MALFORMED_ROW in counts:
            n = counts[WarningCode.MALFORMED_ROW]
            parts.append(f"{n} row{'s' if n != 1 else ''} could not be read")
        if WarningCode.AMBIGUOUS_DATE in counts:
            n = counts[WarningCode.AMBIGUOUS_DATE]
            parts.append(f"{n} date{'s' if n != 1 else ''} may be wrong")
        if WarningCode.DUPLICATE_SECTION in counts:
            n = counts[WarningCode.DUPLICATE_SECTION]
            parts.append(f"{n} repeated section{'s' if n != 1 else ''} replaced earlier ones")
        return "Lab report parsed with warnings: " + "; ".join(parts) + "."

    def to_dict(self) -> Dict:
        return {
            "specimen_id": self.specimen_id,
            "collection_date": self.collection_date,
            "sections": {name: s.to_dict() for name, s in self.sections.items()},
            "warnings": [w.to_dict() for w in self.warnings],
        }
