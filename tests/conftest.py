"""Pytest configuration and fixtures."""


import pytest


@pytest.fixture
def sample_pubspec():
    """Sample pubspec.yaml content covering every dependency shape."""
    return """
name: my_app
version: 1.2.0+3
description: A sample Flutter application.
homepage: https://example.com/my_app
authors:
  - Alice <alice@example.com>
  - Bob <bob@example.com>
environment:
  sdk: ">=3.0.0 <4.0.0"

dependencies:
  flutter:
    sdk: flutter
  http: ^1.1.0
  collection:
  private_lib:
    hosted: https://pub.example.com
    version: ^2.0.0
  shared:
    git:
      url: https://github.com/example/shared.git
      ref: main
      path: packages/shared
  sibling:
    path: ../sibling

dev_dependencies:
  test: ">=1.24.0 <2.0.0"
  lints:
    git: https://github.com/example/lints.git
"""


@pytest.fixture
def temp_pubspec_file(tmp_path, sample_pubspec):
    """Create a temporary pubspec.yaml for testing."""
    manifest = tmp_path / "pubspec.yaml"
    manifest.write_text(sample_pubspec)
    return manifest


@pytest.fixture
def pub_metadata():
    """Build registry metadata in the pub.dev API shape."""

    def build(*versions, latest=None, retracted=()):
        return {
            "name": "pkg",
            "latest": {"version": latest or versions[-1]},
            "versions": [
                {"version": version, "retracted": version in retracted}
                for version in versions
            ],
        }

    return build
