import pytest
from pydantic import ValidationError

from faultline.config import Settings, get_settings
from faultline.services.diagnostics.classification import Severity


class TestDefaults:
    def test_defaults(self, monkeypatch):
        for name in ("ERROR_REPORTING", "SOURCE_PADDING", "REPORT_FORMAT", "EXIT_STATUS"):
            monkeypatch.delenv(f"FAULTLINE_{name}", raising=False)
        settings = Settings()
        assert settings.error_reporting == Severity.ALL
        assert settings.source_padding == 5
        assert settings.report_format == "text"
        assert settings.exit_status == 1
        assert settings.logger_name == "faultline"

    def test_only_reporting_fields(self):
        assert set(Settings.model_fields) == {
            "error_reporting",
            "source_padding",
            "report_format",
            "exit_status",
            "logger_name",
        }


class TestEnvironment:
    def test_mask_from_names(self, monkeypatch):
        monkeypatch.setenv("FAULTLINE_ERROR_REPORTING", "USER_WARNING|USER_NOTICE")
        assert Settings().error_reporting == 1536

    def test_mask_from_number(self, monkeypatch):
        monkeypatch.setenv("FAULTLINE_ERROR_REPORTING", "2")
        assert Settings().error_reporting == 2

    def test_padding_and_format(self, monkeypatch):
        monkeypatch.setenv("FAULTLINE_SOURCE_PADDING", "2")
        monkeypatch.setenv("FAULTLINE_REPORT_FORMAT", "html")
        settings = Settings()
        assert settings.source_padding == 2
        assert settings.report_format == "html"

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestValidation:
    def test_unknown_severity_name(self):
        with pytest.raises(ValidationError):
            Settings(error_reporting="LOUD")

    def test_negative_padding(self):
        with pytest.raises(ValidationError):
            Settings(source_padding=-1)

    def test_zero_exit_status(self):
        with pytest.raises(ValidationError):
            Settings(exit_status=0)

    def test_unknown_report_format(self):
        with pytest.raises(ValidationError):
            Settings(report_format="pdf")
