"""Translation of pub version constraints into PEP 440 specifiers.

Pub constraints look like ``^1.2.3``, ``>=1.0.0 <2.0.0``, ``1.2.3`` or ``any``.
They are mapped onto ``packaging`` specifier sets so that candidate versions can
be filtered with the same machinery pip uses.
"""

import re

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from .errors import InvalidConstraint

_TOKEN = re.compile(r"(?P<op>\^|>=|<=|>|<)?\s*(?P<version>[0-9][0-9A-Za-z.+\-]*)")


def parse_pub_version(text: str | None) -> Version | None:
    """Parse a pub (semver) version, returning None if packaging cannot read it."""
    if not text:
        return None

    try:
        return Version(text.strip())
    except InvalidVersion:
        return None


def caret_upper_bound(version: Version) -> str:
    """Exclusive upper bound for a caret constraint.

    ``^1.2.3`` allows up to but not including 2.0.0, ``^0.2.3`` up to 0.3.0,
    and ``^0.0.3`` up to 0.0.4.
    """
    if version.major > 0:
        return f"{version.major + 1}.0.0"
    if version.minor > 0:
        return f"0.{version.minor + 1}.0"
    return f"0.0.{version.micro + 1}"


def _tokens(constraint: str) -> list[tuple[str | None, Version]]:
    tokens = []
    position = 0
    text = constraint.strip()

    while position < len(text):
        if text[position].isspace():
            position += 1
            continue

        match = _TOKEN.match(text, position)
        if not match:
            raise InvalidConstraint(f"Cannot interpret version constraint '{constraint}'")

        version = parse_pub_version(match.group("version"))
        if version is None:
            raise InvalidConstraint(
                f"Invalid version '{match.group('version')}' in constraint '{constraint}'"
            )

        tokens.append((match.group("op"), version))
        position = match.end()

    return tokens


def to_specifier_set(constraint: str | None) -> SpecifierSet:
    """Convert a pub constraint to a SpecifierSet.

    Args:
        constraint: The constraint as written in pubspec.yaml, or None

    Returns:
        Equivalent SpecifierSet (empty for "any")

    Raises:
        InvalidConstraint: If the constraint cannot be translated
    """
    if constraint is None or constraint.strip() in ("", "any"):
        return SpecifierSet("")

    specifiers = []
    for op, version in _tokens(constraint):
        if op == "^":
            specifiers.append(f">={version}")
            specifiers.append(f"<{caret_upper_bound(version)}")
        elif op is None:
            specifiers.append(f"=={version}")
        else:
            specifiers.append(f"{op}{version}")

    try:
        return SpecifierSet(",".join(specifiers))
    except InvalidSpecifier as e:
        raise InvalidConstraint(f"Cannot interpret version constraint '{constraint}': {e}") from e


def lower_bound(constraint: str | None) -> Version | None:
    """Return the smallest version a constraint names explicitly, if any."""
    if constraint is None or constraint.strip() in ("", "any"):
        return None

    try:
        tokens = _tokens(constraint)
    except InvalidConstraint:
        return None

    bounds = [version for op, version in tokens if op in (None, "^", ">=", ">")]
    return min(bounds) if bounds else None
