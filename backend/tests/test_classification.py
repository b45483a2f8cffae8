import pytest

from faultline.services.diagnostics.classification import (
    ENGINE_SEVERITIES,
    ERROR_NAMES,
    FATAL_ON_SHUTDOWN,
    Severity,
    classify,
    is_fatal_on_shutdown,
    parse_severity_mask,
    severity_for_warning,
)


class LibraryDeprecation(DeprecationWarning):
    pass


class TestClassify:
    @pytest.mark.parametrize(
        "code, name",
        [
            (Severity.ERROR, "Fatal Error"),
            (Severity.PARSE, "Parse Error"),
            (Severity.USER_DEPRECATED, "User Deprecated"),
            (Severity.RECOVERABLE_ERROR, "Recoverable Error"),
        ],
    )
    def test_known_codes(self, code, name):
        assert classify(int(code)) == name

    def test_unknown_code(self):
        assert classify(3) is None

    def test_non_integer_code(self):
        assert classify("1") is None
        assert classify(True) is None

    def test_every_single_severity_has_a_name(self):
        singles = [s for s in Severity if s is not Severity.ALL]
        assert set(ERROR_NAMES) == set(singles)


class TestFatalSet:
    def test_members(self):
        assert FATAL_ON_SHUTDOWN == {
            Severity.PARSE,
            Severity.ERROR,
            Severity.USER_ERROR,
            Severity.CORE_ERROR,
            Severity.COMPILE_ERROR,
        }

    def test_is_fatal_on_shutdown(self):
        assert is_fatal_on_shutdown(1)
        assert not is_fatal_on_shutdown(int(Severity.WARNING))
        assert not is_fatal_on_shutdown("1")

    def test_user_error_is_fatal_but_handleable_live(self):
        assert Severity.USER_ERROR in FATAL_ON_SHUTDOWN
        assert Severity.USER_ERROR not in ENGINE_SEVERITIES


class TestWarningSeverity:
    @pytest.mark.parametrize(
        "category, severity",
        [
            (DeprecationWarning, Severity.DEPRECATED),
            (PendingDeprecationWarning, Severity.DEPRECATED),
            (FutureWarning, Severity.USER_DEPRECATED),
            (UserWarning, Severity.USER_WARNING),
            (SyntaxWarning, Severity.STRICT),
            (RuntimeWarning, Severity.WARNING),
            (ResourceWarning, Severity.NOTICE),
            (Warning, Severity.WARNING),
        ],
    )
    def test_builtin_categories(self, category, severity):
        assert severity_for_warning(category) is severity

    def test_subclass_inherits_parent_severity(self):
        assert severity_for_warning(LibraryDeprecation) is Severity.DEPRECATED

    def test_non_warning_class(self):
        assert severity_for_warning(ValueError) is Severity.WARNING


class TestParseMask:
    def test_int_passes_through(self):
        assert parse_severity_mask(6) == 6

    def test_names(self):
        assert parse_severity_mask("WARNING|NOTICE") == 10

    def test_names_are_case_and_space_insensitive(self):
        assert parse_severity_mask(" warning | user_warning ") == 514

    def test_all(self):
        assert parse_severity_mask("ALL") == 32767

    def test_numeric_text(self):
        assert parse_severity_mask("512") == 512

    def test_empty_text_disables_everything(self):
        assert parse_severity_mask("") == 0

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="unknown severity"):
            parse_severity_mask("WARNING|LOUD")

    def test_bool_rejected(self):
        with pytest.raises(ValueError):
            parse_severity_mask(True)
