"""Parsing of command line values into engine arguments."""
from datetime import datetime, timezone

from kafkascope.config import DEFAULT_DATE_FORMAT
from kafkascope.exceptions import InvalidArgumentError

_ESCAPED_DELIMITERS = {
    "\\n": "\n",
    "\\t": "\t",
    "\\r": "\r",
    "\\0": "\0",
}


def parse_time(value: str, date_format: str = DEFAULT_DATE_FORMAT) -> datetime:
    """Parse a 'DD-MM-YYYY HH:MM:SS' value as a UTC time."""
    try:
        parsed = datetime.strptime(value, date_format)
    except ValueError as e:
        raise InvalidArgumentError("time", f"'{value}' does not match format '{date_format}'") from e
    return parsed.replace(tzinfo=timezone.utc)


def parse_delimiter(value: str) -> str:
    """Validate a single byte delimiter, accepting escapes such as '\\t'."""
    delimiter = _ESCAPED_DELIMITERS.get(value, value)
    if len(delimiter.encode("utf-8")) != 1:
        raise InvalidArgumentError("delimiter", f"{value!r} must be a single ascii character")
    return delimiter


def parse_headers(value: str | None) -> dict[str, str]:
    """Parse comma separated key=value pairs into record headers.

    Examples:
        >>> parse_headers("source=cli,trace=abc")
        {'source': 'cli', 'trace': 'abc'}
    """
    headers: dict[str, str] = {}
    if not value:
        return headers

    for pair in value.split(","):
        name, sep, header_value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            raise InvalidArgumentError("header", f"'{pair}' is not in key=value form")
        headers[name] = header_value.strip()

    return headers
