"""
Text search tools: substring search in one file or across a directory tree.
"""

import fnmatch
import os

from pydantic import Field

from .registry import ToolError
from .schema import ToolInput, define_tool

DEFAULT_GREP_IN_FILE_MAX = 50
DEFAULT_GREP_IN_FILES_MAX = 100


def grep_in_file(path: str, pattern: str, max_matches: int = 0) -> str:
    """Return ``N: line`` for each line of ``path`` containing ``pattern``."""
    if max_matches <= 0:
        max_matches = DEFAULT_GREP_IN_FILE_MAX
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            content = f.read()
    except FileNotFoundError:
        raise ToolError(f"grep_in_file: file not found: {path}")
    except IsADirectoryError:
        raise ToolError(f"grep_in_file: path is a directory: {path}")

    matches = []
    for number, line in enumerate(content.split("\n"), start=1):
        if len(matches) >= max_matches:
            break
        if pattern in line:
            matches.append(f"{number}: {line}")
    if not matches:
        return f'No matches for "{pattern}" in {path}'
    return "\n".join(matches)


def grep_in_files(
    pattern: str,
    root_path: str = ".",
    glob: str = "",
    max_results: int = 0,
) -> str:
    """
    Search every file under ``root_path`` for ``pattern``.

    Args:
        pattern: Substring to look for.
        root_path: Directory to walk.
        glob: Optional basename filter such as ``*.py``.
        max_results: Cap on the total number of matching lines.

    Returns:
        ``path:N: line`` entries, or a no-match message.
    """
    if max_results <= 0:
        max_results = DEFAULT_GREP_IN_FILES_MAX
    root_path = os.path.normpath(root_path or ".")
    glob = glob.strip()
    if not os.path.exists(root_path):
        raise ToolError(f"grep_in_files: path not found: {root_path}")
    if not os.path.isdir(root_path):
        raise ToolError(f"grep_in_files: root_path must be a directory: {root_path}")

    results: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames.sort()
        for name in sorted(filenames):
            if glob and not fnmatch.fnmatch(name, glob):
                continue
            path = os.path.normpath(os.path.join(dirpath, name))
            try:
                with open(path, encoding="utf-8", errors="replace") as f:
                    lines = f.read().split("\n")
            except OSError:
                # unreadable files are skipped
                continue
            for number, line in enumerate(lines, start=1):
                if pattern in line:
                    results.append(f"{path}:{number}: {line}")
                    if len(results) >= max_results:
                        return "\n".join(results)
    if not results:
        return f'No matches for "{pattern}" under {root_path}'
    return "\n".join(results)


class GrepInFileInput(ToolInput):
    path: str = Field(description="The relative path of the file to search.")
    pattern: str = Field(description="The string to search for (substring match).")
    max_matches: int = Field(default=0, description="Optional cap on matches returned; 0 means 50.")


class GrepInFilesInput(ToolInput):
    pattern: str = Field(description="The string to search for (substring match).")
    root_path: str = Field(default=".", description="Directory to search in; default is the current directory.")
    glob: str = Field(default="", description="Optional glob to filter file names (e.g. *.py).")
    max_results: int = Field(default=0, description="Optional cap on total match count; 0 means 100.")


GREP_IN_FILE_TOOL = define_tool(
    "grep_in_file",
    "Search for a string pattern inside a single file; return matching lines with "
    "line numbers. Use when you need to find where something appears in a file.",
    GrepInFileInput,
    lambda args: grep_in_file(args.path, args.pattern, args.max_matches),
)

GREP_IN_FILES_TOOL = define_tool(
    "grep_in_files",
    "Search for a string pattern in files under a directory; return file path and "
    "matching lines. Optionally filter by glob (e.g. *.py).",
    GrepInFilesInput,
    lambda args: grep_in_files(args.pattern, args.root_path, args.glob, args.max_results),
)

GREP_TOOLS = [GREP_IN_FILE_TOOL, GREP_IN_FILES_TOOL]
