"""Scraping of helm command output."""

from chart_release.exceptions import PackagePathNotFoundError

# helm package prints: "Successfully packaged chart and saved it to: /path/to/chart-1.0.0.tgz"
PACKAGE_PATH_MARKER = "saved it to:"


def extract_package_path(output: str) -> str:
    """Return the archive path reported by `helm package`.

    Only the marker is used as a split point, so paths containing
    colons (Windows drives) or spaces come back intact. The first
    matching line wins.

    Args:
        output: Combined stdout/stderr of helm package

    Returns:
        Path of the packaged chart, whitespace trimmed

    Raises:
        PackagePathNotFoundError: If no line carries the marker
    """
    for line in output.splitlines():
        idx = line.find(PACKAGE_PATH_MARKER)
        if idx != -1:
            return line[idx + len(PACKAGE_PATH_MARKER):].strip()

    raise PackagePathNotFoundError(
        "could not determine package path from helm output",
        details=output or "(no output)",
    )
