"""Ecosystem detection for dependency manifests."""

import re

PUBSPEC_FILENAMES = ("pubspec.yaml", "pubspec.yml")

# Top-level keys that only make sense next to a pubspec `name:`
PUBSPEC_KEYS = (
    "version",
    "description",
    "homepage",
    "repository",
    "issue_tracker",
    "documentation",
    "author",
    "authors",
    "publish_to",
    "environment",
    "dependencies",
    "dev_dependencies",
    "dependency_overrides",
    "flutter",
)


def identify(content: str, filename: str | None = None) -> str:
    """Detect ecosystem from content and filename hints.

    Args:
        content: The manifest file content
        filename: Optional filename for additional context

    Returns:
        Detected ecosystem: 'pub' or 'unknown'
    """
    # Filename-based detection (takes precedence)
    if filename and filename.endswith(PUBSPEC_FILENAMES):
        return "pub"

    # Content-based detection: a top-level name plus another pubspec field
    if not re.search(r"^name\s*:\s*\S", content, re.MULTILINE):
        return "unknown"

    pattern = r"^(?:%s)\s*:" % "|".join(PUBSPEC_KEYS)
    if re.search(pattern, content, re.MULTILINE):
        return "pub"

    return "unknown"
