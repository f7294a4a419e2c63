"""Dart pubspec.yaml parsing.

See https://dart.dev/tools/pub/pubspec and https://dart.dev/tools/pub/dependencies.
"""

import logging
from pathlib import Path

from .document import DocumentNode
from .errors import MalformedManifest, MissingRequiredField, UnrecognizedDependencyShape
from .models import (
    Dependency,
    GitDependency,
    HostedDependency,
    Manifest,
    PathDependency,
    SdkDependency,
)

LOG = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = ("dependencies", "dev_dependencies")
SCALAR_FIELDS = ("version", "description", "homepage", "author", "repository", "sdk")


def classify_dependency(
    node: DocumentNode, name: str, section: str = "dependencies"
) -> Dependency:
    """Turn a single dependency value into a typed dependency.

    The first matching shape wins, so an entry carrying both ``git`` and
    ``path`` is a git dependency.
    """
    if node.is_scalar:
        return HostedDependency(version=node.content)

    if node.is_null:
        return HostedDependency()

    if not node.is_mapping:
        raise UnrecognizedDependencyShape(name, section, node.fragment())

    hosted = node.get("hosted")
    if hosted is not None:
        version = node.scalar("version")
        if version is None:
            raise MissingRequiredField("version", name, section)

        if hosted.is_mapping:
            url = hosted.scalar("url")
        elif hosted.is_scalar:
            url = hosted.content
        else:
            url = None

        if url is None:
            raise MissingRequiredField("hosted.url", name, section)

        return HostedDependency(version=version, url=url)

    git = node.get("git")
    if git is not None:
        if git.is_mapping:
            url = git.scalar("url")
            if url is None:
                raise MissingRequiredField("git.url", name, section)
            return GitDependency(url=url, ref=git.scalar("ref"), path=git.scalar("path"))

        if git.is_scalar:
            return GitDependency(url=git.content)

        raise MissingRequiredField("git.url", name, section)

    path = node.get("path")
    if path is not None and path.is_scalar:
        return PathDependency(path=path.content)

    sdk = node.get("sdk")
    if sdk is not None and sdk.is_scalar:
        return SdkDependency(sdk=sdk.content)

    raise UnrecognizedDependencyShape(name, section, node.fragment())


class PubspecParser:
    """Parser for pubspec.yaml documents."""

    def _parse_section(self, root: DocumentNode, section: str) -> dict[str, Dependency]:
        node = root.get(section)
        if node is None or node.is_null:
            return {}

        if not node.is_mapping:
            raise MalformedManifest(
                f"'{section}' must be a mapping but found {node.describe()} (line {node.line})"
            )

        result: dict[str, Dependency] = {}
        for name, value in node.items():
            if name in result:
                LOG.warning(
                    "Duplicate dependency '%s' in '%s', keeping the last declaration", name, section
                )

            dependency = classify_dependency(value, name, section)
            LOG.debug("%s: %s -> %s", section, name, dependency)
            result[name] = dependency

        return result

    def _parse_authors(self, root: DocumentNode) -> frozenset[str]:
        node = root.get("authors")
        if node is None or node.is_null:
            return frozenset()

        if node.is_scalar:
            return frozenset([node.content])

        if not node.is_sequence:
            raise MalformedManifest(f"'authors' must be a list but found {node.describe()}")

        return frozenset(element.content for element in node.elements() if not element.is_null)

    def _scalar_field(self, root: DocumentNode, field: str) -> str | None:
        node = root.get(field)
        if node is None or node.is_null:
            return None

        if not node.is_scalar:
            raise MalformedManifest(f"'{field}' must be a scalar but found {node.describe()}")

        return node.content

    def parse(self, content: str) -> Manifest:
        """Parse pubspec content into a Manifest."""
        root = DocumentNode.from_text(content)

        if root.is_null:
            raise MissingRequiredField("name")

        if not root.is_mapping:
            raise MalformedManifest(f"Expected a mapping at the top level but found {root.describe()}")

        name = self._scalar_field(root, "name")
        if name is None:
            raise MissingRequiredField("name")

        fields = {field: self._scalar_field(root, field) for field in SCALAR_FIELDS}

        return Manifest(
            name=name,
            authors=self._parse_authors(root),
            dependencies=self._parse_section(root, "dependencies"),
            dev_dependencies=self._parse_section(root, "dev_dependencies"),
            **fields,
        )


def parse_pubspec(content: str) -> Manifest:
    """Parse pubspec.yaml content into Manifest.

    Args:
        content: The pubspec.yaml file content

    Returns:
        Parsed Manifest object

    Raises:
        ManifestError: If the document or any dependency entry is malformed
    """
    parser = PubspecParser()
    return parser.parse(content)


def parse_pubspec_file(path: str | Path) -> Manifest:
    """Read a pubspec.yaml file and parse it."""
    return parse_pubspec(Path(path).read_text(encoding="utf-8"))
