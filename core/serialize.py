"""Rendering manifests back to pubspec YAML and to JSON-friendly dicts."""

import yaml

from .models import (
    Dependency,
    GitDependency,
    HostedDependency,
    Manifest,
    PathDependency,
    SdkDependency,
)
from .parse_pub import SCALAR_FIELDS


def dependency_to_pubspec(dep: Dependency):
    """Return the canonical pubspec form of a dependency."""
    if isinstance(dep, HostedDependency):
        if dep.url is None:
            return dep.version
        return {"hosted": dep.url, "version": dep.version}

    if isinstance(dep, GitDependency):
        if dep.ref is None and dep.path is None:
            return {"git": dep.url}
        git = {"url": dep.url}
        if dep.ref is not None:
            git["ref"] = dep.ref
        if dep.path is not None:
            git["path"] = dep.path
        return {"git": git}

    if isinstance(dep, PathDependency):
        return {"path": dep.path}

    if isinstance(dep, SdkDependency):
        return {"sdk": dep.sdk}

    raise TypeError(f"Unsupported dependency type: {type(dep).__name__}")


def manifest_to_dict(manifest: Manifest) -> dict:
    """Return the pubspec wire form of a manifest, omitting unset fields."""
    data: dict = {"name": manifest.name}

    for field in SCALAR_FIELDS:
        value = getattr(manifest, field)
        if value is not None:
            data[field] = value

    if manifest.authors:
        data["authors"] = sorted(manifest.authors)

    for section in ("dependencies", "dev_dependencies"):
        deps = getattr(manifest, section)
        if deps:
            data[section] = {name: dependency_to_pubspec(dep) for name, dep in deps.items()}

    return data


def dump_pubspec(manifest: Manifest) -> str:
    """Serialize a manifest to pubspec YAML.

    All scalars are emitted as strings so that re-parsing yields an equal manifest.
    """
    return yaml.safe_dump(
        manifest_to_dict(manifest),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def dependency_to_json(name: str, dep: Dependency, section: str = "dependencies") -> dict:
    """Tagged representation used by the CLI and the web API."""
    data = {"name": name, "section": section, "kind": dep.kind}

    if isinstance(dep, HostedDependency):
        data.update(version=dep.version, url=dep.url)
    elif isinstance(dep, GitDependency):
        data.update(url=dep.url, ref=dep.ref, path=dep.path)
    elif isinstance(dep, PathDependency):
        data.update(path=dep.path)
    elif isinstance(dep, SdkDependency):
        data.update(sdk=dep.sdk)

    return data


def manifest_to_json(manifest: Manifest) -> dict:
    data = {"name": manifest.name}
    for field in SCALAR_FIELDS:
        data[field] = getattr(manifest, field)
    data["authors"] = sorted(manifest.authors)

    for section in ("dependencies", "dev_dependencies"):
        data[section] = [
            dependency_to_json(name, dep, section)
            for name, dep in getattr(manifest, section).items()
        ]

    return data
