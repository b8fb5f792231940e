"""
File tools: read, write, edit, copy, move, remove and stat single files.

Paths are resolved against the process working directory.
"""

import logging
import os
import shutil
import stat
import time

from pydantic import Field

from .registry import ToolError
from .schema import ToolInput, define_tool

logger = logging.getLogger(__name__)


def _read_text(path: str) -> str:
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()
    except FileNotFoundError:
        raise ToolError(f"file not found: {path}")
    except IsADirectoryError:
        raise ToolError(f"path is a directory, not a file: {path}")
    except OSError as e:
        raise ToolError(f"cannot read {path}: {e.strerror or e}")


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent and parent != ".":
        os.makedirs(parent, exist_ok=True)


def read_file(path: str) -> str:
    """Return the contents of a text file."""
    return _read_text(path)


def read_file_lines(path: str, start_line: int, end_line: int) -> str:
    """
    Return lines ``start_line`` through ``end_line`` (1-based, inclusive).

    ``end_line`` past the end of the file is clamped.
    """
    if start_line < 1 or end_line < 1:
        raise ToolError("read_file_lines: start_line and end_line must be >= 1")
    if end_line < start_line:
        raise ToolError("read_file_lines: end_line must be >= start_line")
    lines = _read_text(path).split("\n")
    if start_line > len(lines):
        raise ToolError(
            f"read_file_lines: start_line {start_line} is beyond file length {len(lines)}"
        )
    return "\n".join(lines[start_line - 1:min(end_line, len(lines))])


def create_file(path: str, content: str) -> str:
    """Create (or overwrite) a file, creating parent directories."""
    path = os.path.normpath(path)
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return f"Created file {path}"


def edit_file(path: str, old_string: str, new_string: str) -> str:
    """Replace every occurrence of ``old_string`` in a file."""
    if not old_string:
        raise ToolError("edit_file: old_string must not be empty")
    content = _read_text(path)
    count = content.count(old_string)
    if count == 0:
        raise ToolError("edit_file: old_string not found in file")
    with open(path, "w", encoding="utf-8") as f:
        f.write(content.replace(old_string, new_string))
    return f"Replaced {count} occurrence(s) of the given string in {path}"


def copy_file(from_path: str, to_path: str) -> str:
    """Copy a file, keeping its permission bits."""
    from_path = os.path.normpath(from_path)
    to_path = os.path.normpath(to_path)
    if not os.path.exists(from_path):
        raise ToolError(f"copy_file: source not found: {from_path}")
    if os.path.isdir(from_path):
        raise ToolError(f"copy_file: source is a directory: {from_path}")
    _ensure_parent(to_path)
    shutil.copyfile(from_path, to_path)
    shutil.copymode(from_path, to_path)
    return f"Copied {from_path} to {to_path}"


def move_file(from_path: str, to_path: str) -> str:
    """Move or rename a file; copies then removes across filesystems."""
    from_path = os.path.normpath(from_path)
    to_path = os.path.normpath(to_path)
    if not os.path.exists(from_path):
        raise ToolError(f"move_file: source not found: {from_path}")
    if os.path.isdir(from_path):
        raise ToolError(f"move_file: source is a directory, not a file: {from_path}")
    try:
        os.replace(from_path, to_path)
        return f"Moved {from_path} to {to_path}"
    except OSError as e:
        logger.debug(f"Rename {from_path} -> {to_path} failed ({e}), copying instead")
    _ensure_parent(to_path)
    shutil.copy2(from_path, to_path)
    os.remove(from_path)
    return f"Moved {from_path} to {to_path} (cross-filesystem)"


def remove_file(path: str) -> str:
    """Delete a single file."""
    if not os.path.lexists(path):
        raise ToolError(f"remove_file: file not found: {path}")
    if os.path.isdir(path):
        raise ToolError(f"remove_file: path is a directory, not a file: {path}")
    os.remove(path)
    return f"Removed file {path}"


def file_info(path: str) -> str:
    """Describe size, modification time, type and mode of a path."""
    try:
        st = os.stat(path)
    except FileNotFoundError:
        raise ToolError(f"file_info: path not found: {path}")
    mod_time = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(st.st_mtime))
    return (
        f"path: {path}\n"
        f"size: {st.st_size}\n"
        f"modTime: {mod_time}\n"
        f"isDir: {str(stat.S_ISDIR(st.st_mode)).lower()}\n"
        f"mode: {stat.filemode(st.st_mode)}"
    )


class PathInput(ToolInput):
    path: str = Field(description="The relative path of a file in the working directory.")


class ReadFileLinesInput(ToolInput):
    path: str = Field(description="The relative path of the file.")
    start_line: int = Field(description="First line to include (1-based).")
    end_line: int = Field(description="Last line to include (1-based, inclusive).")


class CreateFileInput(ToolInput):
    path: str = Field(description="The relative path of the file to create.")
    content: str = Field(description="The full content to write to the file.")


class EditFileInput(ToolInput):
    path: str = Field(description="The relative path of the file to edit.")
    old_string: str = Field(description="The exact string to find and replace in the file.")
    new_string: str = Field(description="The string to replace old_string with.")


class FromToInput(ToolInput):
    from_path: str = Field(description="The path of the source file.")
    to_path: str = Field(description="The destination path.")


READ_FILE_TOOL = define_tool(
    "read_file",
    "Read the contents of a given relative file path. Use this when you want "
    "to see what's inside a file. Do not use this with directory names.",
    PathInput,
    lambda args: read_file(args.path),
)

READ_FILE_LINES_TOOL = define_tool(
    "read_file_lines",
    "Read a range of lines from a file. Lines are 1-based: start_line 1 is the "
    "first line. Use for large files when you only need a portion.",
    ReadFileLinesInput,
    lambda args: read_file_lines(args.path, args.start_line, args.end_line),
)

CREATE_FILE_TOOL = define_tool(
    "create_file",
    "Create a new file at the given path with the given content. Creates parent "
    "directories if needed. If the file already exists, it is overwritten.",
    CreateFileInput,
    lambda args: create_file(args.path, args.content),
)

EDIT_FILE_TOOL = define_tool(
    "edit_file",
    "Edit an existing file by replacing one string with another. All occurrences "
    "of old_string are replaced. Returns the number of replacements made.",
    EditFileInput,
    lambda args: edit_file(args.path, args.old_string, args.new_string),
)

COPY_FILE_TOOL = define_tool(
    "copy_file",
    "Copy a file to another path. Overwrites the destination if it exists. Use to "
    "duplicate a file or create a backup before editing.",
    FromToInput,
    lambda args: copy_file(args.from_path, args.to_path),
)

MOVE_FILE_TOOL = define_tool(
    "move_file",
    "Move or rename a file to a new path. Overwrites the destination if it exists "
    "and is a file.",
    FromToInput,
    lambda args: move_file(args.from_path, args.to_path),
)

REMOVE_FILE_TOOL = define_tool(
    "remove_file",
    "Remove (delete) a file at the given path. Does not remove directories.",
    PathInput,
    lambda args: remove_file(args.path),
)

FILE_INFO_TOOL = define_tool(
    "file_info",
    "Return metadata for a path: size, modification time, whether it is a "
    "directory, and permissions. Use this to check if a path exists before reading.",
    PathInput,
    lambda args: file_info(args.path),
)

FILE_TOOLS = [
    READ_FILE_TOOL,
    READ_FILE_LINES_TOOL,
    CREATE_FILE_TOOL,
    EDIT_FILE_TOOL,
    COPY_FILE_TOOL,
    MOVE_FILE_TOOL,
    REMOVE_FILE_TOOL,
    FILE_INFO_TOOL,
]
