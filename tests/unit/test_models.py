"""Tests for issues, settings and logging setup."""

import logging

import pytest

from core.config import DEFAULT_HOSTED_URL, Settings
from core.logger import LOG, setup_logging
from core.models import EPOCH, Issue, Severity, create_and_log_issue


class TestIssue:

    def test_defaults(self):
        issue = Issue(source="PubResolver", message="boom")

        assert issue.severity == Severity.ERROR
        assert issue.affected_path is None
        assert issue.timestamp.tzinfo is not None

    def test_str(self):
        issue = Issue(source="PubResolver", message="boom", severity=Severity.WARNING, timestamp=EPOCH)

        assert str(issue) == "Unknown time [WARNING]: PubResolver - boom"

    def test_line_breaks_are_normalized(self):
        issue = Issue(source="s", message="a\r\nb\rc")

        assert issue.message == "a\nb\nc"

    def test_to_dict_omits_missing_path(self):
        data = Issue(source="s", message="m").to_dict()

        assert "affected_path" not in data
        assert data["severity"] == "ERROR"

    def test_create_and_log_issue(self, caplog):
        with caplog.at_level(logging.WARNING):
            issue = create_and_log_issue("Parser", "odd entry", Severity.WARNING, "dependencies")

        assert issue.affected_path == "dependencies"
        assert "Parser: odd entry" in caplog.text


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("PUBCHECK_HOSTED_URL", "PUBCHECK_TIMEOUT", "PUBCHECK_MAX_CONCURRENCY", "PUBCHECK_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.hosted_url == DEFAULT_HOSTED_URL
        assert settings.timeout == 30.0
        assert settings.max_concurrency == 6
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PUBCHECK_HOSTED_URL", "https://pub.example.com/")
        monkeypatch.setenv("PUBCHECK_TIMEOUT", "5")
        monkeypatch.setenv("PUBCHECK_MAX_CONCURRENCY", "2")
        monkeypatch.setenv("PUBCHECK_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.hosted_url == "https://pub.example.com"
        assert settings.timeout == 5.0
        assert settings.max_concurrency == 2
        assert settings.log_level == "DEBUG"

    def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("PUBCHECK_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="PUBCHECK_TIMEOUT"):
            Settings.from_env()


class TestLogging:

    def test_setup_logging_sets_level(self):
        setup_logging("DEBUG")
        assert LOG.level == logging.DEBUG

        setup_logging("WARNING")
        assert LOG.level == logging.WARNING

    def test_setup_logging_is_idempotent(self):
        setup_logging()
        setup_logging()

        rich_handlers = [h for h in LOG.handlers if type(h).__name__ == "RichHandler"]
        assert len(rich_handlers) == 1

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty")
        assert LOG.level == logging.INFO
