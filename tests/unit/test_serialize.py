"""Tests for rendering manifests back to YAML and JSON."""

import pytest
import yaml

from core.models import (
    GitDependency,
    HostedDependency,
    Manifest,
    PathDependency,
    SdkDependency,
)
from core.parse_pub import parse_pubspec
from core.serialize import (
    dependency_to_json,
    dependency_to_pubspec,
    dump_pubspec,
    manifest_to_dict,
    manifest_to_json,
)

SCENARIOS = {
    "bare": '"^1.0.0"',
    "null": "",
    "hosted_scalar": '{hosted: "1.2.3", version: "^1.0.0"}',
    "hosted_mapping": '{hosted: {url: "https://reg.example/"}, version: "^1.0.0"}',
    "git_scalar": '{git: "https://example.com/x.git"}',
    "git_mapping": '{git: {url: "u", ref: "main", path: "sub"}}',
    "path": '{path: "../sibling"}',
    "sdk": '{sdk: "flutter"}',
}


class TestDump:
    """Test pubspec serialization."""

    @pytest.mark.parametrize("scenario", sorted(SCENARIOS))
    def test_round_trip(self, scenario):
        """Parsing, dumping and parsing again yields an equal manifest."""
        content = f"name: app\ndependencies:\n  pkg: {SCENARIOS[scenario]}\n"
        manifest = parse_pubspec(content)

        again = parse_pubspec(dump_pubspec(manifest))

        assert again == manifest

    def test_round_trip_sample(self, sample_pubspec):
        manifest = parse_pubspec(sample_pubspec)

        assert parse_pubspec(dump_pubspec(manifest)) == manifest

    def test_numeric_looking_strings_stay_strings(self):
        manifest = parse_pubspec("name: app\nversion: 1.10\ndependencies:\n  pkg: 2.0\n")
        dumped = dump_pubspec(manifest)

        assert yaml.safe_load(dumped)["version"] == "1.10"
        assert parse_pubspec(dumped) == manifest

    def test_canonical_shapes(self):
        assert dependency_to_pubspec(HostedDependency("^1.0.0")) == "^1.0.0"
        assert dependency_to_pubspec(HostedDependency()) is None
        assert dependency_to_pubspec(HostedDependency("1.0.0", "https://r")) == {
            "hosted": "https://r",
            "version": "1.0.0",
        }
        assert dependency_to_pubspec(GitDependency("u")) == {"git": "u"}
        assert dependency_to_pubspec(GitDependency("u", ref="v1")) == {
            "git": {"url": "u", "ref": "v1"}
        }
        assert dependency_to_pubspec(PathDependency("../x")) == {"path": "../x"}
        assert dependency_to_pubspec(SdkDependency("flutter")) == {"sdk": "flutter"}

    def test_unset_fields_are_omitted(self):
        data = manifest_to_dict(Manifest(name="app"))

        assert data == {"name": "app"}

    def test_authors_sorted(self):
        data = manifest_to_dict(Manifest(name="app", authors=frozenset({"b", "a"})))

        assert data["authors"] == ["a", "b"]


class TestJson:
    """Test the tagged JSON form."""

    def test_dependency_to_json(self):
        data = dependency_to_json("shared", GitDependency("u", ref="main"), "dev_dependencies")

        assert data == {
            "name": "shared",
            "section": "dev_dependencies",
            "kind": "git",
            "url": "u",
            "ref": "main",
            "path": None,
        }

    def test_manifest_to_json(self, sample_pubspec):
        data = manifest_to_json(parse_pubspec(sample_pubspec))

        assert data["name"] == "my_app"
        assert data["version"] == "1.2.0+3"
        kinds = {entry["name"]: entry["kind"] for entry in data["dependencies"]}
        assert kinds == {
            "flutter": "sdk",
            "http": "hosted",
            "collection": "hosted",
            "private_lib": "hosted",
            "shared": "git",
            "sibling": "path",
        }
        assert [entry["name"] for entry in data["dev_dependencies"]] == ["test", "lints"]
