import re
from typing import List, Optional, Union

from labreport.constants import DEFAULT_DATE_FORMAT
from labreport.parsing.dates import find_slash_date, format_slash_date, parse_slash_date
from labreport.parsing.models import Flag, ParseWarning, Result, UnparseableRow, WarningCode

NUMERIC_RE = re.compile(r"^[0-9.]+$")
FLAG_RE = re.compile(r"^(H|L|HIGH|LOW)$", re.IGNORECASE)

FLAG_TOKENS = {Flag.HIGH: "H", Flag.LOW: "L"}


def is_numeric(tok: str) -> bool:
    return bool(NUMERIC_RE.match(tok))


def parse_flag(tok: Optional[str]) -> Optional[Flag]:
    if tok is None or not FLAG_RE.match(tok):
        return None
    return Flag.HIGH if tok[0].lower() == "h" else Flag.LOW


def tokenize_row(line: str, date_format: str = DEFAULT_DATE_FORMAT) -> Union[Result, UnparseableRow]:
    """
    Split one table line into the seven result fields by token shape.

    Layout read, left to right:
        <test name ...> <current> [H|L|High|Low] [<previous> <D/M/YYYY>] [<units> [<reference ...>]]

    The test name runs up to the first integer/decimal token, which is the
    current result. Lines without such a token come back as UnparseableRow.
    A line that starts with a number still yields a Result, with an empty
    test name and a MalformedRow warning.
    """
    parts = line.split()

    current_idx = next((i for i, tok in enumerate(parts) if is_numeric(tok)), None)
    if current_idx is None:
        return UnparseableRow(line)

    test_name = " ".join(parts[:current_idx])
    current_result = parts[current_idx]
    cursor = current_idx + 1

    warnings: List[ParseWarning] = []
    if not test_name:
        warnings.append(ParseWarning(
            code=WarningCode.MALFORMED_ROW,
            message=f"Row {line.strip()!r} has no test name before its result",
            line=line,
        ))

    flag = parse_flag(parts[cursor] if cursor < len(parts) else None)
    if flag is not None:
        cursor += 1

    # Previous value sits right before its date; the date must lie past the cursor
    previous_result: Optional[str] = None
    previous_date: Optional[str] = None
    date_idx = next((i for i in range(cursor + 1, len(parts)) if find_slash_date(parts[i])), None)
    if date_idx is not None:
        previous_result = parts[date_idx - 1]
        previous_date, exact = parse_slash_date(parts[date_idx], date_format)
        if not exact:
            guess = f"; read as {previous_date}" if previous_date else ""
            warnings.append(ParseWarning(
                code=WarningCode.AMBIGUOUS_DATE,
                message=f"Previous date {parts[date_idx]!r} for {test_name or current_result!r} is not a valid date{guess}",
                line=line,
            ))
        cursor = date_idx + 1

    units: Optional[str] = None
    reference_interval: Optional[str] = None
    if cursor < len(parts):
        units = parts[cursor]
        if cursor + 1 < len(parts):
            reference_interval = " ".join(parts[cursor + 1:])

    return Result(
        test_name=test_name,
        current_result=current_result,
        flag=flag,
        previous_result=previous_result,
        previous_date=previous_date,
        units=units,
        reference_interval=reference_interval,
        warnings=tuple(warnings),
    )


def format_row(result: Result, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """
    Render a Result as a single table line for `tokenize_row`.

    The line reads back to the same Result unless a token is ambiguous by
    shape: with no flag, a flag-shaped previous result or units token
    (H, L, High, Low) is read back as the flag. Test names holding a
    numeric token and previous results without a date do not survive either.
    """
    parts: List[str] = []
    if result.test_name:
        parts.append(result.test_name)
    parts.append(result.current_result)
    if result.flag is not None:
        parts.append(FLAG_TOKENS[result.flag])
    if result.previous_date is not None:
        parts.append(result.previous_result or "-")
        parts.append(format_slash_date(result.previous_date, date_format))
    if result.units is not None:
        parts.append(result.units)
        if result.reference_interval:
            parts.append(result.reference_interval)
    return " ".join(parts)
