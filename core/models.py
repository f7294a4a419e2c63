"""Core data models for PubCheck."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union

LOG = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class HostedDependency:
    """A package resolved from a registry by name and version constraint.

    No version constraint means any version is accepted.
    """

    version: str | None = None
    url: str | None = None
    kind: str = field(default="hosted", init=False, repr=False)


@dataclass(frozen=True)
class GitDependency:
    """A package cloned from a repository at an optional ref and sub-path."""

    url: str
    path: str | None = None
    ref: str | None = None
    kind: str = field(default="git", init=False, repr=False)


@dataclass(frozen=True)
class PathDependency:
    """A sibling package on the local filesystem."""

    path: str
    kind: str = field(default="path", init=False, repr=False)


@dataclass(frozen=True)
class SdkDependency:
    """A package bundled with an SDK such as flutter."""

    sdk: str
    kind: str = field(default="sdk", init=False, repr=False)


Dependency = Union[HostedDependency, GitDependency, PathDependency, SdkDependency]


@dataclass(frozen=True)
class Manifest:
    """A parsed pubspec.

    Both dependency sections are copied into read-only mappings on creation.
    """

    name: str
    version: str | None = None
    description: str | None = None
    homepage: str | None = None
    author: str | None = None
    authors: frozenset[str] = frozenset()
    repository: str | None = None
    sdk: str | None = None
    dependencies: Mapping[str, Dependency] = field(default_factory=dict)
    dev_dependencies: Mapping[str, Dependency] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "authors", frozenset(self.authors))
        object.__setattr__(self, "dependencies", MappingProxyType(dict(self.dependencies)))
        object.__setattr__(self, "dev_dependencies", MappingProxyType(dict(self.dev_dependencies)))

    def __hash__(self):
        return hash((
            self.name,
            self.version,
            self.description,
            self.homepage,
            self.author,
            self.authors,
            self.repository,
            self.sdk,
            frozenset(self.dependencies.items()),
            frozenset(self.dev_dependencies.items()),
        ))

    def hosted(self, include_dev: bool = False) -> list[tuple[str, HostedDependency]]:
        """Return (name, dependency) pairs for hosted dependencies only."""
        sections = [self.dependencies]
        if include_dev:
            sections.append(self.dev_dependencies)

        return [
            (name, dep)
            for section in sections
            for name, dep in section.items()
            if isinstance(dep, HostedDependency)
        ]


class Severity(str, Enum):
    HINT = "HINT"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class Issue:
    """A problem encountered while processing a manifest."""

    source: str
    message: str
    severity: Severity = Severity.ERROR
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    affected_path: str | None = None

    def __post_init__(self):
        self.message = normalize_line_breaks(self.message)

    def __str__(self) -> str:
        time = "Unknown time" if self.timestamp == EPOCH else self.timestamp.isoformat()
        return f"{time} [{self.severity.value}]: {self.source} - {self.message}"

    def to_dict(self) -> dict:
        data = {
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
        }
        if self.affected_path is not None:
            data["affected_path"] = self.affected_path
        return data


@dataclass
class ResolutionResult:
    """Result of resolving a hosted dependency against a registry."""

    name: str
    dependency: HostedDependency
    chosen_version: str
    reason: str
    latest_version: str | None = None
    semver_delta: str = "unknown"  # patch, minor, major, unknown
    dev: bool = False


def normalize_line_breaks(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


_LEVELS = {
    Severity.HINT: logging.DEBUG,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


def create_and_log_issue(
    source: str,
    message: str,
    severity: Severity = Severity.ERROR,
    affected_path: str | None = None,
) -> Issue:
    """Create an Issue and log its message at the level matching its severity."""
    issue = Issue(source=source, message=message, severity=severity, affected_path=affected_path)
    LOG.log(_LEVELS[severity], "%s: %s", source, issue.message)
    return issue
