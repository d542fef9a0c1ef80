from __future__ import annotations

from datetime import datetime
from typing import Optional


# LinkedIn exports mix several date shapes across vintages and locales.
_FORMATS = (
    "%b %Y",        # Jan 2020
    "%B %Y",        # January 2020
    "%Y",           # 2020
    "%d %b %Y",     # 15 Jan 2024 (Connected On)
    "%Y-%m-%d",     # ISO
    "%m/%d/%Y",     # US
    "%b %d, %Y",    # Jan 15, 2020
    "%B %d, %Y",    # January 15, 2020
    "%Y-%m",        # 2020-01
)


def parse_linkedin_date(value: Optional[str]) -> Optional[str]:
    """Parse a LinkedIn date into ISO ``YYYY-MM-DD``.

    Empty input is None. A non-empty value that matches no known format raises
    ValueError so the caller can skip just that row.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    for fmt in _FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    raise ValueError(f"unrecognized date: {text!r}")
