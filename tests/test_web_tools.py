"""
Tests for the network tools with requests mocked out.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from tool_agent.tools import ToolError
from tool_agent.tools.web import (
    MAX_RETURN_CHARS,
    fetch_file,
    fetch_html,
    parse_search_results,
    search_internet,
)


def _response(status=200, body=b"", content_type="text/html", reason="OK"):
    response = MagicMock()
    response.status_code = status
    response.reason = reason
    response.encoding = "utf-8"
    response.headers = {"Content-Type": content_type}
    response.iter_content.side_effect = lambda chunk_size=1: iter([body])
    response.text = body.decode("utf-8")
    return response


SEARCH_PAGE = """
<html><body>
  <div class="result">
    <a class="result__a" href="https://example.com/one">Example One</a>
    <a class="result__snippet">First snippet</a>
  </div>
  <div class="result">
    <a class="result__a" href="https://example.com/two">Example Two</a>
    <div class="result__body">Body text only</div>
  </div>
  <div class="result">
    <a class="result__a" href="https://example.com/three">Example Three</a>
  </div>
</body></html>
"""


class TestUrlValidation:
    @pytest.mark.parametrize("url", ["", "ftp://example.com/x", "file:///etc/passwd", "http://"])
    def test_rejected(self, url):
        with pytest.raises(ToolError):
            fetch_html(url)


class TestFetchHtml:
    @patch("tool_agent.tools.web.requests.get")
    def test_returns_body(self, mock_get):
        mock_get.return_value = _response(body=b"<html>hi</html>")

        assert fetch_html("https://example.com") == "<html>hi</html>"
        headers = mock_get.call_args.kwargs["headers"]
        assert "User-Agent" in headers

    @patch("tool_agent.tools.web.requests.get")
    def test_non_2xx_keeps_body(self, mock_get):
        mock_get.return_value = _response(404, b"missing", reason="Not Found")

        assert fetch_html("https://example.com/x") == "HTTP status: 404 Not Found\n\nmissing"

    @patch("tool_agent.tools.web.requests.get")
    def test_truncated(self, mock_get):
        mock_get.return_value = _response(body=b"a" * (MAX_RETURN_CHARS + 10))

        body = fetch_html("https://example.com")
        assert body.startswith("a" * MAX_RETURN_CHARS)
        assert body.endswith(f"[Content truncated to {MAX_RETURN_CHARS} characters.]")

    @patch("tool_agent.tools.web.requests.get")
    def test_transport_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ToolError, match="fetch_html: refused"):
            fetch_html("https://example.com")


class TestFetchFile:
    @patch("tool_agent.tools.web.requests.get")
    def test_non_2xx_is_error(self, mock_get):
        mock_get.return_value = _response(500, b"", reason="Server Error")
        with pytest.raises(ToolError, match="HTTP status 500"):
            fetch_file("https://example.com/f")

    @patch("tool_agent.tools.web.requests.get")
    def test_text_content_returned(self, mock_get):
        mock_get.return_value = _response(body=b'{"a": 1}', content_type="application/json; charset=utf-8")
        assert fetch_file("https://example.com/data.json") == '{"a": 1}'

    @patch("tool_agent.tools.web.requests.get")
    def test_binary_summarised(self, mock_get):
        mock_get.return_value = _response(body=b"\x00" * 10, content_type="application/octet-stream")
        assert fetch_file("https://example.com/x.bin") == (
            "Binary response, 10 bytes; use save_path to download to disk"
        )

    @patch("tool_agent.tools.web.requests.get")
    def test_save_to_disk(self, mock_get, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mock_get.return_value = _response(body=b"\x01\x02\x03", content_type="application/octet-stream")

        assert fetch_file("https://example.com/x.bin", "out/x.bin") == "Saved to out/x.bin, 3 bytes"
        assert (tmp_path / "out" / "x.bin").read_bytes() == b"\x01\x02\x03"


class TestSearch:
    def test_parse_results(self):
        text = parse_search_results(SEARCH_PAGE)
        assert text == (
            "1. Example One\n   https://example.com/one\n   First snippet\n\n"
            "2. Example Two\n   https://example.com/two\n   Body text only\n\n"
            "3. Example Three\n   https://example.com/three"
        )

    def test_parse_limit(self):
        assert parse_search_results(SEARCH_PAGE, 1).count("example.com") == 1

    def test_long_snippet_truncated(self):
        page = f'<div class="result"><a class="result__a" href="u">T</a><a class="result__snippet">{"s" * 300}</a></div>'
        assert parse_search_results(page).endswith("s" * 200 + "...")

    def test_no_results(self):
        assert parse_search_results("<html></html>") == "No results found for the query."

    @patch("tool_agent.tools.web.requests.get")
    def test_search_request(self, mock_get):
        mock_get.return_value = _response(body=SEARCH_PAGE.encode())

        result = search_internet("python dataclasses", num_results=2)

        assert result.startswith("1. Example One")
        assert "3. Example Three" not in result
        assert mock_get.call_args.kwargs["params"] == {"q": "python dataclasses"}

    @patch("tool_agent.tools.web.requests.get")
    def test_search_http_error(self, mock_get):
        mock_get.return_value = _response(503)
        with pytest.raises(ToolError, match="HTTP status 503"):
            search_internet("anything")

    def test_query_required(self):
        with pytest.raises(ToolError, match="query is required"):
            search_internet(" ")
