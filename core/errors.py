"""Errors raised while reading and resolving pubspec manifests."""


class ManifestError(ValueError):
    """Base class for manifest parsing failures."""


class MalformedManifest(ManifestError):
    """The document is not a well-formed pubspec."""


class MissingRequiredField(ManifestError):
    """A mandatory field is absent."""

    def __init__(self, field: str, dependency: str | None = None, section: str | None = None):
        self.field = field
        self.dependency = dependency
        self.section = section

        if dependency:
            message = f"Dependency '{dependency}' in '{section}' is missing required field '{field}'"
        else:
            message = f"Manifest is missing required field '{field}'"
        super().__init__(message)


class UnrecognizedDependencyShape(ManifestError):
    """A dependency entry matches none of the known shapes."""

    def __init__(self, dependency: str, section: str | None = None, fragment: str | None = None):
        self.dependency = dependency
        self.section = section
        self.fragment = fragment

        message = f"Unexpected format for dependency '{dependency}'"
        if section:
            message += f" in '{section}'"
        if fragment:
            message += f": {fragment}"
        super().__init__(message)


class InvalidConstraint(ManifestError):
    """A version constraint cannot be interpreted."""


class ResolutionError(Exception):
    """A registry lookup failed."""
