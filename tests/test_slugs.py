from __future__ import annotations

import pytest

from services.slugs import extract_linkedin_slug, profile_url_for_slug


@pytest.mark.parametrize(
    "url,slug",
    [
        ("https://www.linkedin.com/in/jane-doe-123", "jane-doe-123"),
        ("https://www.linkedin.com/in/jane-doe-123/", "jane-doe-123"),
        ("https://www.linkedin.com/in/jane-doe-123?trk=public_profile", "jane-doe-123"),
        ("http://linkedin.com/in/JaneDoe#about", "JaneDoe"),
        ("linkedin.com/in/abc/details/skills/", "abc"),
    ],
)
def test_slug_follows_in_segment(url, slug):
    assert extract_linkedin_slug(url) == slug


@pytest.mark.parametrize(
    "url",
    [None, "", "https://www.linkedin.com/company/acme", "https://www.linkedin.com/in/", "not a url"],
)
def test_non_profile_urls_have_no_slug(url):
    assert extract_linkedin_slug(url) is None


def test_profile_url_for_slug():
    assert profile_url_for_slug("abc") == "https://www.linkedin.com/in/abc"
    assert profile_url_for_slug(None) is None
