"""Wrapper around the helm command-line tool.

Helm is treated as an opaque external command. Only the output of
`helm package` is consumed programmatically; every other invocation
streams helm's own output to the operator and is judged by exit status.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from chart_release.exceptions import HelmError
from chart_release.helm.output import extract_package_path
from chart_release.utils.shell import ShellError, run

logger = logging.getLogger(__name__)

HELM = "helm"

# Release name used when rendering templates for validation only
TEMPLATE_RELEASE_NAME = "release-name"


@dataclass(frozen=True)
class SignOptions:
    """Chart signing options for `helm package --sign`."""

    keyring: str = ""
    key: str = ""
    passphrase_file: str = ""

    def to_args(self) -> list[str]:
        args = ["--sign"]
        if self.keyring:
            args.extend(["--keyring", self.keyring])
        if self.key:
            args.extend(["--key", self.key])
        if self.passphrase_file:
            args.extend(["--passphrase-file", self.passphrase_file])
        return args


class HelmCLI:
    """Runs helm subcommands against one chart directory."""

    def __init__(self, chart_path: Path, timeout: int = 300) -> None:
        self.chart_path = Path(chart_path)
        self.timeout = timeout

    def lint(self, strict: bool = False) -> None:
        """Lint the chart."""
        args = ["lint", str(self.chart_path)]
        if strict:
            args.append("--strict")
        self._run(args, "helm lint failed")

    def template(self, kube_version: str = "", api_versions: list[str] | None = None) -> None:
        """Validate templates by rendering them.

        Rendered manifests are discarded; only errors matter.
        """
        args = ["template", TEMPLATE_RELEASE_NAME, str(self.chart_path)]
        if kube_version:
            args.extend(["--kube-version", kube_version])
        for api in api_versions or []:
            args.extend(["--api-versions", api])

        try:
            run([HELM, *args], capture=True, timeout=self.timeout)
        except ShellError as e:
            raise HelmError("helm template failed", details=e.stderr or e.stdout) from e
        except OSError as e:
            raise _not_found(e) from e

    def dependency_update(self) -> None:
        """Update chart dependencies."""
        self._run(["dependency", "update", str(self.chart_path)], "helm dependency update failed")

    def dependency_build(self) -> None:
        """Build chart dependencies."""
        self._run(["dependency", "build", str(self.chart_path)], "helm dependency build failed")

    def package(self, output_dir: Path, sign: SignOptions | None = None) -> Path:
        """Package the chart and return the path of the produced archive.

        Args:
            output_dir: Directory the archive is written to
            sign: Signing options, or None for an unsigned package

        Returns:
            Path of the .tgz written by helm

        Raises:
            HelmError: If helm package fails
            PackagePathNotFoundError: If helm did not report the archive path
        """
        args = ["package", str(self.chart_path), "-d", str(output_dir)]
        if sign is not None:
            args.extend(sign.to_args())

        try:
            result = run([HELM, *args], merge_stderr=True, timeout=self.timeout)
        except ShellError as e:
            raise HelmError("helm package failed", details=e.output) from e
        except OSError as e:
            raise _not_found(e) from e

        return Path(extract_package_path(result.stdout))

    def version(self) -> str:
        """Return `helm version --short` output, e.g. 'v3.14.0+g3fc9f4b'."""
        try:
            result = run([HELM, "version", "--short"], timeout=30)
        except ShellError as e:
            raise HelmError("helm version failed", details=e.output) from e
        except OSError as e:
            raise _not_found(e) from e
        return result.stdout.strip()

    def _run(self, args: list[str], failure: str) -> None:
        logger.debug("helm %s", " ".join(args))
        try:
            run([HELM, *args], capture=False, timeout=self.timeout)
        except ShellError as e:
            raise HelmError(failure, details=f"Exit code: {e.returncode}") from e
        except OSError as e:
            raise _not_found(e) from e


def _not_found(error: OSError) -> HelmError:
    return HelmError(
        "Helm CLI not found in PATH",
        details=str(error),
        fix_hint="Install Helm 3: https://helm.sh/docs/intro/install/",
    )
