"""Safe subprocess execution utilities.

Provides shell command execution for the helm CLI with:
- ANSI escape code stripping (keeps scraped helm output parseable)
- Secrets passed on stdin instead of argv
- Combined stdout/stderr capture for output scraping
- Timeout support
"""

import logging
import os
import re
import shlex
import shutil
import subprocess
from pathlib import Path

from chart_release.exceptions import ReleaseTimeoutError

logger = logging.getLogger(__name__)


class ShellError(Exception):
    """Exception raised when a shell command fails.

    Attributes:
        cmd: The command that failed
        returncode: Exit code of the failed command
        stdout: Standard output (ANSI stripped)
        stderr: Standard error (ANSI stripped)
    """

    def __init__(
        self,
        cmd: str,
        returncode: int,
        stdout: str,
        stderr: str,
    ) -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command failed with exit code {returncode}: {cmd}")

    @property
    def output(self) -> str:
        """Captured output, stderr first."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)

    def __str__(self) -> str:
        parts = [f"Command failed: {self.cmd}"]
        parts.append(f"Exit code: {self.returncode}")
        if self.stderr:
            parts.append(f"Stderr: {self.stderr}")
        if self.stdout:
            parts.append(f"Stdout: {self.stdout}")
        return "\n".join(parts)


# Matches: ESC[...m, ESC[...;...m, and other control sequences
ANSI_PATTERN = re.compile(
    r"\x1b\[[0-9;]*[a-zA-Z]|\x1b\][^\x07]*\x07|\x1b[PX^_][^\x1b]*\x1b\\"
)

CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences and control characters from text.

    Args:
        text: Input text potentially containing ANSI codes

    Returns:
        Clean text with all ANSI sequences removed
    """
    if not text:
        return ""
    result = ANSI_PATTERN.sub("", text)
    result = CONTROL_CHARS_PATTERN.sub("", result)
    return result


def run(
    cmd: str | list[str],
    cwd: Path | None = None,
    capture: bool = True,
    check: bool = True,
    timeout: int = 300,
    env: dict[str, str] | None = None,
    input_text: str | None = None,
    merge_stderr: bool = False,
    strip_output: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a command safely.

    Key security features:
    - Always uses shell=False to prevent shell injection
    - Secrets go through input_text (stdin), never through argv
    - Raises ShellError with context on failure

    When capture is False the child inherits this process's stdout and
    stderr, so the operator sees the tool's own output as it runs.

    subprocess.run kills the child when the timeout expires or when the
    caller is interrupted, so no orphaned helm processes survive.

    Args:
        cmd: Command to execute (string or list of arguments)
        cwd: Working directory for the command
        capture: Whether to capture stdout/stderr
        check: Whether to raise ShellError on non-zero exit
        timeout: Maximum execution time in seconds
        env: Additional environment variables
        input_text: Text written to the child's stdin
        merge_stderr: Capture stderr into stdout (combined output)
        strip_output: Whether to strip ANSI codes from output

    Returns:
        CompletedProcess with stdout/stderr (ANSI stripped if requested)

    Raises:
        ShellError: If command fails and check=True
        ReleaseTimeoutError: If command exceeds timeout
    """
    cmd_list = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)

    merged_env = {**os.environ}
    if env:
        merged_env.update(env)

    stdout = stderr = None
    if capture:
        stdout = subprocess.PIPE
        stderr = subprocess.STDOUT if merge_stderr else subprocess.PIPE

    logger.debug("Running: %s", " ".join(cmd_list))
    try:
        result = subprocess.run(
            cmd_list,
            cwd=cwd,
            stdout=stdout,
            stderr=stderr,
            input=input_text,
            text=True,
            timeout=timeout,
            env=merged_env,
        )
    except subprocess.TimeoutExpired as e:
        raise ReleaseTimeoutError(
            f"Command timed out after {timeout}s: {' '.join(cmd_list)}",
            fix_hint="Raise the matching value under 'timeouts' in the config",
        ) from e

    if capture and strip_output:
        result.stdout = strip_ansi(result.stdout) if result.stdout else ""
        result.stderr = strip_ansi(result.stderr) if result.stderr else ""

    if check and result.returncode != 0:
        raise ShellError(
            cmd=" ".join(cmd_list),
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    return result


def is_command_available(cmd: str) -> bool:
    """Check if a command is available in PATH."""
    return shutil.which(cmd) is not None
