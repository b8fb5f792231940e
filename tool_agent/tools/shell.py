"""
Shell command tool.

Runs a command through ``sh -c`` and reports exit code, stdout and stderr.
There is no sandbox: the command runs with the agent's own permissions.
"""

import logging
import subprocess
from typing import Optional

from pydantic import Field

from ..config import config
from .registry import ToolError
from .schema import ToolInput, define_tool

logger = logging.getLogger(__name__)


def run_command(
    command: str,
    working_dir: str = "",
    timeout: Optional[float] = None,
) -> str:
    """
    Run a shell command.

    Args:
        command: Command line passed to ``sh -c``.
        working_dir: Optional directory to run in.
        timeout: Seconds before the command is killed; defaults to config.

    Returns:
        ``exitCode``/``stdout``/``stderr`` report. A non-zero exit is a
        normal result, not an error.
    """
    command = command.strip()
    if not command:
        raise ToolError("run_command: command is required")
    timeout = timeout if timeout is not None else config.tools.command_timeout

    logger.debug(f"Running command {command!r} in {working_dir or '.'}")
    try:
        proc = subprocess.run(
            ["sh", "-c", command],
            cwd=working_dir or None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise ToolError(f"run_command: timed out after {timeout:g} seconds")
    except FileNotFoundError as e:
        raise ToolError(f"run_command: {e.strerror or e}: {e.filename or working_dir}")

    if proc.returncode == 0:
        return f"exitCode: 0\nstdout:\n{proc.stdout}"
    return f"exitCode: {proc.returncode}\nstdout:\n{proc.stdout}stderr:\n{proc.stderr}"


class RunCommandInput(ToolInput):
    command: str = Field(description="The shell command to run (e.g. make test).")
    working_dir: str = Field(
        default="",
        description="Optional working directory for the command; default is the current directory.",
    )


RUN_COMMAND_TOOL = define_tool(
    "run_command",
    "Run a shell command and return stdout, stderr, and exit code. Use for builds, "
    "tests, linters, or any shell command. Working directory is optional.",
    RunCommandInput,
    lambda args: run_command(args.command, args.working_dir),
)
