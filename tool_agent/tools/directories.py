"""
Directory tools: listing, searching by name, creating and removing directories.
"""

import os
import shutil

from pydantic import Field

from .registry import ToolError
from .schema import ToolInput, define_tool


def _require_dir(path: str, tool_name: str) -> None:
    if not os.path.exists(path):
        raise ToolError(f"{tool_name}: path not found: {path}")
    if not os.path.isdir(path):
        raise ToolError(f"{tool_name}: path must be a directory: {path}")


def list_files(path: str = ".") -> str:
    """List the entries of one directory, directories marked with ``/``."""
    path = os.path.normpath(path or ".")
    _require_dir(path, "list_files")
    names = []
    with os.scandir(path) as entries:
        for entry in entries:
            names.append(entry.name + "/" if entry.is_dir() else entry.name)
    return "\n".join(sorted(names))


def list_files_recursive(root_path: str = ".", max_depth: int = 0) -> str:
    """
    List everything under ``root_path``.

    ``max_depth`` 0 means unlimited; depth 1 lists immediate children only.
    """
    root_path = os.path.normpath(root_path or ".")
    _require_dir(root_path, "list_files_recursive")
    entries = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        rel = os.path.relpath(dirpath, root_path)
        depth = 0 if rel == "." else rel.count(os.sep) + 1
        if max_depth > 0 and depth >= max_depth:
            dirnames[:] = []
            continue
        for name in dirnames:
            entries.append(os.path.normpath(os.path.join(dirpath, name)) + "/")
        for name in filenames:
            entries.append(os.path.normpath(os.path.join(dirpath, name)))
    return "\n".join(sorted(entries))


def search_file(file_name: str, root_path: str = ".") -> str:
    """Find files whose basename equals ``file_name``."""
    file_name = file_name.strip()
    if not file_name:
        raise ToolError("search_file: file_name is required")
    root_path = os.path.normpath(root_path or ".")
    _require_dir(root_path, "search_file")
    matches = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames.sort()
        for name in sorted(filenames):
            if name == file_name:
                matches.append(os.path.normpath(os.path.join(dirpath, name)))
    if not matches:
        return f'No file named "{file_name}" found under {root_path}'
    return "\n".join(matches)


def create_directory(path: str) -> str:
    """Create a directory and its parents (``mkdir -p``)."""
    path = os.path.normpath(path) if path else ""
    if path in ("", "."):
        raise ToolError("create_directory: path is required")
    if os.path.exists(path):
        if not os.path.isdir(path):
            raise ToolError(f"create_directory: path exists and is not a directory: {path}")
        return f"Directory already exists: {path}"
    os.makedirs(path)
    return f"Created directory {path}"


def remove_directory(path: str, recursive: bool = False) -> str:
    """Remove a directory; without ``recursive`` it must be empty."""
    path = os.path.normpath(path)
    _require_dir(path, "remove_directory")
    if recursive:
        shutil.rmtree(path)
        return f"Removed directory and contents: {path}"
    try:
        os.rmdir(path)
    except OSError as e:
        raise ToolError(f"remove_directory: {e.strerror or e} (directory may not be empty)")
    return f"Removed directory {path}"


def get_working_dir() -> str:
    return os.getcwd()


class ListFilesInput(ToolInput):
    path: str = Field(
        default=".",
        description="The relative path of a directory in the working directory.",
    )


class ListFilesRecursiveInput(ToolInput):
    root_path: str = Field(default=".", description="Directory to list; default is the current directory.")
    max_depth: int = Field(
        default=0,
        description="Optional maximum depth (0 = unlimited). Depth 1 is immediate children only.",
    )


class SearchFileInput(ToolInput):
    file_name: str = Field(description="The name of the file to search for (e.g. README.md).")
    root_path: str = Field(default=".", description="The directory to search in. Default is the current directory.")


class DirectoryInput(ToolInput):
    path: str = Field(description="The path of the directory.")


class RemoveDirectoryInput(ToolInput):
    path: str = Field(description="The path of the directory to remove.")
    recursive: bool = Field(
        default=False,
        description="If true, remove the directory and all contents; if false, it must be empty.",
    )


class EmptyInput(ToolInput):
    pass


LIST_FILES_TOOL = define_tool(
    "list_files",
    "List all files and directories at the given path. Use this when you want to "
    "see what files exist in a directory. Directories have a trailing /.",
    ListFilesInput,
    lambda args: list_files(args.path),
)

LIST_FILES_RECURSIVE_TOOL = define_tool(
    "list_files_recursive",
    "List all files and directories under a directory recursively, optionally "
    "limited by max depth. Directories have a trailing /.",
    ListFilesRecursiveInput,
    lambda args: list_files_recursive(args.root_path, args.max_depth),
)

SEARCH_FILE_TOOL = define_tool(
    "search_file",
    "Search for a file by name under a given directory. Returns the relative "
    "path(s) of any matching file(s). Use this when you only know a file's name.",
    SearchFileInput,
    lambda args: search_file(args.file_name, args.root_path),
)

CREATE_DIRECTORY_TOOL = define_tool(
    "create_directory",
    "Create a directory at the given path, creating parent directories if needed "
    "(like mkdir -p).",
    DirectoryInput,
    lambda args: create_directory(args.path),
)

REMOVE_DIRECTORY_TOOL = define_tool(
    "remove_directory",
    "Remove a directory. If recursive is true, remove its contents too; otherwise "
    "the directory must be empty.",
    RemoveDirectoryInput,
    lambda args: remove_directory(args.path, args.recursive),
)

GET_WORKING_DIR_TOOL = define_tool(
    "get_working_dir",
    "Return the current working directory path. Use this to reason about relative paths.",
    EmptyInput,
    lambda args: get_working_dir(),
)

DIRECTORY_TOOLS = [
    LIST_FILES_TOOL,
    LIST_FILES_RECURSIVE_TOOL,
    SEARCH_FILE_TOOL,
    CREATE_DIRECTORY_TOOL,
    REMOVE_DIRECTORY_TOOL,
    GET_WORKING_DIR_TOOL,
]
