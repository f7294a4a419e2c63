"""Pub package version resolution."""

import asyncio
import logging

import httpx
from packaging.specifiers import SpecifierSet
from packaging.version import Version

from .config import DEFAULT_HOSTED_URL
from .constraints import lower_bound, parse_pub_version, to_specifier_set
from .errors import InvalidConstraint, ManifestError, ResolutionError
from .models import (
    HostedDependency,
    Issue,
    Manifest,
    ResolutionResult,
    Severity,
    create_and_log_issue,
)

LOG = logging.getLogger(__name__)

PUB_ACCEPT = "application/vnd.pub.v2+json"


class PubResolver:
    """Resolver for hosted pub package versions."""

    def __init__(
        self,
        hosted_url: str = DEFAULT_HOSTED_URL,
        timeout: float = 30.0,
        max_concurrency: int = 6,
    ):
        """Initialize pub resolver.

        Args:
            hosted_url: Registry used for dependencies without their own hosted URL
            timeout: Request timeout in seconds
            max_concurrency: Maximum concurrent requests
        """
        self.hosted_url = hosted_url.rstrip("/")
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self._cache: dict[tuple[str, str], dict] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    def registry_for(self, dep: HostedDependency) -> str:
        return (dep.url or self.hosted_url).rstrip("/")

    async def get_latest_version(self, package_name: str, registry: str | None = None) -> str:
        """Get the latest version the registry advertises for a package."""
        registry = registry or self.hosted_url
        metadata = await self._fetch_package_metadata(package_name, registry)
        if not metadata:
            raise ResolutionError(f"Package {package_name} not found on {registry}")

        latest = metadata.get("latest", {}).get("version")
        if latest:
            return latest

        versions = self._available_versions(metadata)
        if not versions:
            raise ResolutionError(f"No versions found for package {package_name}")

        return str(max(versions))

    async def resolve_dependency(
        self, name: str, dep: HostedDependency, dev: bool = False
    ) -> ResolutionResult:
        """Resolve a hosted dependency to the newest version its constraint allows.

        Args:
            name: Package name
            dep: The hosted dependency as declared in the manifest
            dev: Whether the dependency came from dev_dependencies

        Returns:
            Resolution result with chosen version
        """
        registry = self.registry_for(dep)

        async with self._semaphore:
            metadata = await self._fetch_package_metadata(name, registry)

        if not metadata:
            raise ResolutionError(f"Package {name} not found on {registry}")

        available = self._available_versions(metadata)
        if not available:
            raise ResolutionError(f"No versions found for package {name}")

        stable = [version for version in available if not version.is_prerelease]
        latest = max(stable or available)

        try:
            spec_set = to_specifier_set(dep.version)
        except InvalidConstraint:
            spec_set = None

        if spec_set is None:
            chosen = latest
            reason = f"Invalid constraint {dep.version}, using latest available"
        elif not str(spec_set):
            chosen = self._newest(spec_set, available) or latest
            reason = "Latest available version (no constraints)"
        else:
            compatible = self._newest(spec_set, available)
            if compatible is not None:
                chosen = compatible
                reason = f"Latest version satisfying constraint {dep.version}"
            else:
                chosen = latest
                reason = f"No versions satisfy {dep.version}, using latest available"

        if registry != self.hosted_url:
            reason += f" on {registry}"

        return ResolutionResult(
            name=name,
            dependency=dep,
            chosen_version=str(chosen),
            reason=reason,
            latest_version=str(latest),
            semver_delta=self._calculate_semver_delta(dep, chosen),
            dev=dev,
        )

    async def resolve_manifest(
        self, manifest: Manifest, include_dev: bool = False
    ) -> tuple[list[ResolutionResult], list[Issue]]:
        """Resolve every hosted dependency of a manifest concurrently.

        Dependencies that are not hosted are reported as hints. Failed lookups
        are reported as errors rather than aborting the run.
        """
        sections = [("dependencies", manifest.dependencies, False)]
        if include_dev:
            sections.append(("dev_dependencies", manifest.dev_dependencies, True))

        issues: list[Issue] = []
        pending: list[tuple[str, str, HostedDependency, bool]] = []

        for section, deps, dev in sections:
            for name, dep in deps.items():
                if isinstance(dep, HostedDependency):
                    pending.append((section, name, dep, dev))
                else:
                    issues.append(
                        create_and_log_issue(
                            "PubResolver",
                            f"Skipping '{name}': {dep.kind} dependencies are not resolved from a registry",
                            Severity.HINT,
                            affected_path=section,
                        )
                    )

        outcomes = await asyncio.gather(
            *(self.resolve_dependency(name, dep, dev) for _, name, dep, dev in pending),
            return_exceptions=True,
        )

        results: list[ResolutionResult] = []
        for (section, name, _, _), outcome in zip(pending, outcomes):
            if isinstance(outcome, (ResolutionError, ManifestError)):
                issues.append(
                    create_and_log_issue(
                        "PubResolver",
                        f"Failed to resolve '{name}': {outcome}",
                        Severity.ERROR,
                        affected_path=section,
                    )
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)

        return results, issues

    async def _fetch_package_metadata(self, package_name: str, registry: str) -> dict | None:
        """Fetch package metadata from a pub registry.

        Args:
            package_name: Name of the package
            registry: Base URL of the registry

        Returns:
            Package metadata dict or None if not found
        """
        key = (registry, package_name)
        if key in self._cache:
            return self._cache[key]

        url = f"{registry}/api/packages/{package_name}"
        LOG.debug("Fetching %s", url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers={"Accept": PUB_ACCEPT})
                if response.status_code == 404:
                    return None
                response.raise_for_status()

                metadata = response.json()
                self._cache[key] = metadata
                return metadata

        except httpx.TimeoutException as e:
            LOG.warning("Timeout fetching metadata for %s", package_name)
            raise ResolutionError(f"Timeout fetching metadata for {package_name}") from e
        except httpx.HTTPStatusError as e:
            LOG.warning("HTTP error fetching %s: %s", package_name, e)
            raise ResolutionError(f"HTTP error fetching {package_name}: {e}") from e
        except httpx.HTTPError as e:
            LOG.warning("Network error fetching %s: %s", package_name, e)
            raise ResolutionError(f"Network error fetching {package_name}: {e}") from e
        except ValueError as e:
            raise ResolutionError(f"Invalid response for {package_name}: {e}") from e

    def _available_versions(self, metadata: dict) -> list[Version]:
        """Parseable, non-retracted versions listed in registry metadata."""
        versions = []
        for entry in metadata.get("versions", []):
            if entry.get("retracted"):
                continue
            version = parse_pub_version(entry.get("version"))
            if version is not None:
                versions.append(version)
        return versions

    def _newest(self, spec_set: SpecifierSet, versions: list[Version]) -> Version | None:
        compatible = list(spec_set.filter(versions))
        return max(compatible) if compatible else None

    def _calculate_semver_delta(self, dep: HostedDependency, new_version: Version) -> str:
        """Calculate semantic version delta.

        Returns:
            Semver delta: "major", "minor", "patch", or "unknown"
        """
        current = lower_bound(dep.version)
        if current is None or new_version <= current:
            return "unknown"

        if new_version.major > current.major:
            return "major"
        if new_version.minor > current.minor:
            return "minor"
        if new_version.micro > current.micro:
            return "patch"
        return "unknown"
