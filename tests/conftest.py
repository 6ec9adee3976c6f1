"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock


# ---------------------------------------------------------------------------
# Representative playbooks
# ---------------------------------------------------------------------------

LOGIN_PLAYBOOK = """\
load{url:"https://example.com/login"}
type{selector:"#user", text:"alice"}
value{selector:"#pass", value:"s3cret"}
submit{selector:"#user"}
compare{selector:"#msg", value:"Welcome"}
"""

MULTILINE_PLAYBOOK = """\
load{
  url:"https://example.com",
  timeout:"5s",
}
click{selector:"#go"}
"""

LOGFMT_PLAYBOOK = """\
load url=https://example.com/login
type selector=#user text="alice smith"

click selector=#go timeout=5s
"""


def make_mock_page(url: str = "https://example.com/", text: str = "") -> MagicMock:
    """Create a mock Playwright Page with a single shared locator."""
    page = MagicMock()
    page.url = url
    page.goto = AsyncMock()
    page.screenshot = AsyncMock(return_value=b"fake_png_data")

    mock_locator = MagicMock()
    mock_locator.first = mock_locator
    mock_locator.click = AsyncMock()
    mock_locator.press_sequentially = AsyncMock()
    mock_locator.evaluate = AsyncMock(return_value=None)
    mock_locator.wait_for = AsyncMock()
    mock_locator.scroll_into_view_if_needed = AsyncMock()
    mock_locator.text_content = AsyncMock(return_value=text)

    page.locator = MagicMock(return_value=mock_locator)
    return page


def make_mock_session(text: str = "", screenshot: bytes = b"png") -> MagicMock:
    """Create a mock BrowserSession; every collaborator call succeeds."""
    session = MagicMock()
    session.navigate = AsyncMock()
    session.click = AsyncMock()
    session.send_keys = AsyncMock()
    session.submit = AsyncMock()
    session.set_value = AsyncMock()
    session.wait_visible = AsyncMock()
    session.wait_ready = AsyncMock()
    session.scroll_into_view = AsyncMock()
    session.get_text = AsyncMock(return_value=text)
    session.capture_screenshot = AsyncMock(return_value=screenshot)
    return session
