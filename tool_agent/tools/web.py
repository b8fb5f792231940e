"""
Network tools: fetch a page, download a file, search the web.

Uses requests for HTTP and BeautifulSoup to parse the DuckDuckGo HTML
results page, so no search API key is needed.
"""

import logging
import os
from typing import Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from pydantic import Field

from ..config import config
from .registry import ToolError
from .schema import ToolInput, define_tool

logger = logging.getLogger(__name__)

MAX_READ_BYTES = 5 * 1024 * 1024
MAX_RETURN_CHARS = 50_000
DEFAULT_NUM_RESULTS = 10
SNIPPET_CHARS = 200

TEXT_CONTENT_TYPES = ("application/json", "application/xml", "application/javascript")


def _validate_url(raw_url: str, tool_name: str) -> str:
    url = raw_url.strip()
    if not url:
        raise ToolError(f"{tool_name}: url is required")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ToolError(f"{tool_name}: url must use http or https scheme")
    if not parsed.netloc:
        raise ToolError(f"{tool_name}: url must have a host")
    return url


def _get(url: str, timeout: float, tool_name: str, user_agent: Optional[str] = None) -> requests.Response:
    headers = {"User-Agent": user_agent or config.tools.user_agent}
    try:
        return requests.get(url, headers=headers, timeout=timeout, stream=True)
    except requests.RequestException as e:
        raise ToolError(f"{tool_name}: {e}")


def _read_capped(response: requests.Response, limit: int = MAX_READ_BYTES) -> bytes:
    """Read at most ``limit`` bytes of a streamed response body."""
    chunks = []
    size = 0
    for chunk in response.iter_content(chunk_size=64 * 1024):
        if not chunk:
            continue
        chunks.append(chunk)
        size += len(chunk)
        if size >= limit:
            break
    return b"".join(chunks)[:limit]


def _decode(response: requests.Response, body: bytes) -> str:
    return body.decode(response.encoding or "utf-8", errors="replace")


def _truncate(text: str) -> str:
    if len(text) > MAX_RETURN_CHARS:
        return text[:MAX_RETURN_CHARS] + f"\n\n[Content truncated to {MAX_RETURN_CHARS} characters.]"
    return text


def fetch_html(url: str) -> str:
    """
    GET a URL and return its body as text.

    A non-2xx status is not an error: the body is returned behind a status
    line so the model can reason about the response.
    """
    url = _validate_url(url, "fetch_html")
    logger.debug(f"Fetching {url}")
    response = _get(url, config.tools.html_timeout, "fetch_html")
    try:
        body = _truncate(_decode(response, _read_capped(response)))
    except requests.RequestException as e:
        raise ToolError(f"fetch_html: read body: {e}")
    finally:
        response.close()

    if 200 <= response.status_code < 300:
        return body
    return f"HTTP status: {response.status_code} {response.reason or ''}".rstrip() + "\n\n" + body


def fetch_file(url: str, save_path: str = "") -> str:
    """
    Download a URL.

    Args:
        url: http(s) URL to download.
        save_path: Optional destination; the body is streamed to disk.

    Returns:
        A save summary, the text body for text-like content types, or a
        size summary for binary content.
    """
    url = _validate_url(url, "fetch_file")
    logger.debug(f"Downloading {url}")
    response = _get(url, config.tools.fetch_timeout, "fetch_file")
    try:
        if not 200 <= response.status_code < 300:
            raise ToolError(f"fetch_file: HTTP status {response.status_code} {response.reason or ''}".rstrip())

        save_path = save_path.strip()
        if save_path:
            return _save(response, os.path.normpath(save_path))

        content_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
        if content_type.startswith("text/") or content_type in TEXT_CONTENT_TYPES:
            return _truncate(_decode(response, _read_capped(response)))

        size = len(_read_capped(response))
        return f"Binary response, {size} bytes; use save_path to download to disk"
    except requests.RequestException as e:
        raise ToolError(f"fetch_file: read: {e}")
    finally:
        response.close()


def _save(response: requests.Response, save_path: str) -> str:
    parent = os.path.dirname(save_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    written = 0
    try:
        with open(save_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=64 * 1024):
                f.write(chunk)
                written += len(chunk)
    except (OSError, requests.RequestException) as e:
        if os.path.exists(save_path):
            os.remove(save_path)
        raise ToolError(f"fetch_file: write: {e}")
    return f"Saved to {save_path}, {written} bytes"


def parse_search_results(html: str, num_results: int = DEFAULT_NUM_RESULTS) -> str:
    """Format the results of a DuckDuckGo HTML results page."""
    soup = BeautifulSoup(html, "html.parser")
    lines = []
    for result in soup.select(".result"):
        if len(lines) >= num_results:
            break
        link = result.select_one("a.result__a") or result.find("a")
        href = link.get("href", "") if link else ""
        title = link.get_text(strip=True) if link else ""
        if not href and not title:
            continue
        snippet_tag = result.select_one(".result__snippet") or result.select_one(".result__body")
        snippet = snippet_tag.get_text(" ", strip=True) if snippet_tag else ""

        number = len(lines) + 1
        entry = f"{number}. {title}\n   {href or '(no URL)'}"
        if snippet:
            if len(snippet) > SNIPPET_CHARS:
                snippet = snippet[:SNIPPET_CHARS] + "..."
            entry += f"\n   {snippet}"
        lines.append(entry)

    if not lines:
        return "No results found for the query."
    return "\n\n".join(lines)


def search_internet(query: str, num_results: int = 0) -> str:
    """Search DuckDuckGo and return numbered title/URL/snippet entries."""
    query = query.strip()
    if not query:
        raise ToolError("search_internet: query is required")
    if num_results <= 0:
        num_results = DEFAULT_NUM_RESULTS

    headers = {"User-Agent": f"Mozilla/5.0 (compatible; {config.tools.user_agent})"}
    logger.debug(f"Searching for {query!r}")
    try:
        response = requests.get(
            config.tools.search_url,
            params={"q": query},
            headers=headers,
            timeout=config.tools.search_timeout,
        )
    except requests.RequestException as e:
        raise ToolError(f"search_internet: {e}")
    if response.status_code != 200:
        raise ToolError(f"search_internet: HTTP status {response.status_code}")
    return parse_search_results(response.text, num_results)


class FetchHtmlInput(ToolInput):
    url: str = Field(description="The full URL to fetch (must be http or https).")


class FetchFileInput(ToolInput):
    url: str = Field(description="The URL of the file to fetch (must be http or https).")
    save_path: str = Field(
        default="",
        description="Optional path to save the file to, relative to the working directory.",
    )


class SearchInternetInput(ToolInput):
    query: str = Field(description="The search query.")
    num_results: int = Field(default=0, description="Optional maximum number of results to return (default 10).")


FETCH_HTML_TOOL = define_tool(
    "fetch_html",
    "Fetch the HTML or text body of a URL. Use this when you need to read the content "
    "of a web page. For non-2xx status the body is still returned with a status line.",
    FetchHtmlInput,
    lambda args: fetch_html(args.url),
)

FETCH_FILE_TOOL = define_tool(
    "fetch_file",
    "Download a file from a URL. If save_path is provided, saves the response to that "
    "path and returns a summary. Otherwise returns the body as text for text-like "
    "content types, or a short message for binary responses.",
    FetchFileInput,
    lambda args: fetch_file(args.url, args.save_path),
)

SEARCH_INTERNET_TOOL = define_tool(
    "search_internet",
    "Search the internet and return a list of result titles, URLs, and snippets. Use "
    "this when you need current information, documentation, or web pages.",
    SearchInternetInput,
    lambda args: search_internet(args.query, args.num_results),
)

WEB_TOOLS = [FETCH_HTML_TOOL, FETCH_FILE_TOOL, SEARCH_INTERNET_TOOL]
