from pathlib import Path
from unittest.mock import patch

import pytest

from legaldoc.page import PageView

FIXTURES = Path(__file__).resolve().parent / "fixtures"

PRIVACY_URL = "https://acme.example/privacy-policy"
BLOG_URL = "https://acme.example/blog/my-post"


def fixture_html(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def quiet_console():
    # keep rich log lines out of captured output
    with patch("legaldoc.log.console.log"):
        yield


@pytest.fixture
def privacy_page() -> PageView:
    return PageView.from_html(fixture_html("privacy_policy.html"), PRIVACY_URL)


@pytest.fixture
def blog_page() -> PageView:
    return PageView.from_html(fixture_html("blog_post.html"), BLOG_URL)
