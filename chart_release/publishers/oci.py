"""OCI registry publisher.

Pushes charts with `helm push` to registries such as ghcr.io,
Docker Hub, Harbor, ECR or ACR.

Configuration:
    repository:
        type: oci
        url: oci://ghcr.io/owner/charts
        username: owner          # optional
        password: ${TOKEN}       # optional, sent on stdin
        registry_config: ~/.config/helm/registry/config.json  # optional
"""

import logging
from pathlib import Path
from typing import ClassVar

from chart_release.exceptions import ReleaseTimeoutError
from chart_release.publishers.base import (
    Publisher,
    PublishResult,
    RepositoryType,
)
from chart_release.utils.shell import ShellError, run

logger = logging.getLogger(__name__)

HELM = "helm"


class OCIPublisher(Publisher):
    """Publisher for OCI registries.

    Authentication is a separate `helm registry login` session; the
    password is piped on stdin so it never shows up in process listings.
    """

    repository_type: ClassVar[RepositoryType] = RepositoryType.OCI
    display_name: ClassVar[str] = "OCI Registry"

    def publish(self, package_path: Path) -> PublishResult:
        """Log in (when credentials are configured) and helm push the chart."""
        if self.target.has_credentials:
            login = self._login()
            if not login.ok:
                return login

        cmd = [HELM, "push", str(package_path), self.target.url, *self._registry_config_args()]
        logger.info("Pushing %s to %s", package_path, self.target.url)
        try:
            # helm's own progress output goes straight to the terminal
            run(cmd, capture=False, timeout=self.timeout)
        except ShellError as e:
            return PublishResult.failed(
                message="helm push failed",
                details=f"Exit code: {e.returncode}",
            )
        except ReleaseTimeoutError as e:
            return PublishResult.failed(message="helm push timed out", details=e.message)
        except OSError as e:
            return PublishResult.failed(message="helm push failed", details=str(e))

        return PublishResult.success(f"Pushed {package_path.name} to {self.target.url}")

    def logout(self) -> PublishResult:
        """Log out of the registry host. Failures are reported, not raised."""
        host = self.target.registry_host
        cmd = [HELM, "registry", "logout", host, *self._registry_config_args()]
        try:
            run(cmd, capture=True, timeout=self.timeout)
        except ShellError as e:
            return PublishResult.failed(
                message=f"registry logout from {host} failed",
                details=e.stderr or e.stdout,
            )
        except (ReleaseTimeoutError, OSError) as e:
            return PublishResult.failed(
                message=f"registry logout from {host} failed",
                details=str(e),
            )
        return PublishResult.success(f"Logged out of {host}")

    def _login(self) -> PublishResult:
        host = self.target.registry_host
        cmd = [
            HELM,
            "registry",
            "login",
            host,
            "--username",
            self.target.username,
            "--password-stdin",
            *self._registry_config_args(),
        ]
        logger.info("Logging in to registry %s as %s", host, self.target.username)
        try:
            run(cmd, capture=True, input_text=self.target.password, timeout=self.timeout)
        except ShellError as e:
            return PublishResult.failed(
                message=f"registry login failed for {host}",
                details=e.stderr or e.stdout,
            )
        except (ReleaseTimeoutError, OSError) as e:
            return PublishResult.failed(
                message=f"registry login failed for {host}",
                details=str(e),
            )
        return PublishResult.success(f"Logged in to {host}")

    def _registry_config_args(self) -> list[str]:
        if self.target.registry_config:
            return ["--registry-config", self.target.registry_config]
        return []
