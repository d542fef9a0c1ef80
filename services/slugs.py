from __future__ import annotations

import re
from typing import Optional


_SLUG_RE = re.compile(r"/in/([^/?#\s]+)")


def extract_linkedin_slug(url: Optional[str]) -> Optional[str]:
    """Return the path segment following ``/in/`` in a profile URL.

    ``https://www.linkedin.com/in/jane-doe-123?trk=x`` -> ``jane-doe-123``.
    Anything without an ``/in/<segment>`` part yields None.
    """
    if not url:
        return None
    m = _SLUG_RE.search(str(url).strip())
    if not m:
        return None
    return m.group(1)


def profile_url_for_slug(slug: Optional[str]) -> Optional[str]:
    if not slug:
        return None
    return f"https://www.linkedin.com/in/{slug}"
