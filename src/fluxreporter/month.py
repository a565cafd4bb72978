import re
from dataclasses import dataclass
from datetime import datetime

import structlog

from fluxreporter.errors import ParseError

logger = structlog.get_logger()

_MONTH_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})")
# datetime stops at year 9999, so 9999-12 has no following month
_LAST_MONTH = (9999, 12)


@dataclass(frozen=True, slots=True)
class Month:
    """
    Month is a calendar month anchored to local time at day 1, 00:00.

    The statistics query covers the half-open interval [start, end),
    where end is day 1 of the following month.
    """

    year: "int"
    month: "int"

    @classmethod
    def parse(cls, text: "str") -> "Month":
        """
        parses a strict YYYY-MM string. Any other layout, even one
        naming a valid date, raises ParseError.
        """
        match = _MONTH_PATTERN.fullmatch(text or "")
        if match is None:
            logger.debug("month_parse_failed", text=text)
            raise ParseError("month must be formatted as YYYY-MM", {"month": text})

        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12 or year < 1 or (year, month) >= _LAST_MONTH:
            logger.debug("month_parse_failed", text=text)
            raise ParseError("month out of range", {"month": text})

        return cls(year=year, month=month)

    @property
    def start(self) -> "datetime":
        return datetime(self.year, self.month, 1).astimezone()

    @property
    def end(self) -> "datetime":
        if self.month == 12:
            return datetime(self.year + 1, 1, 1).astimezone()
        return datetime(self.year, self.month + 1, 1).astimezone()

    def start_date(self) -> "str":
        return self.start.date().isoformat()

    def end_date(self) -> "str":
        return self.end.date().isoformat()

    def start_datetime(self) -> "str":
        return self.start.isoformat()

    def end_datetime(self) -> "str":
        return self.end.isoformat()

    def __str__(self) -> "str":
        return f"{self.year:04d}-{self.month:02d}"
