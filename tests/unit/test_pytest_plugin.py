"""Tests for the pytest integration."""

import os

import pytest

from temp_env_vars import ScopeContentionError, TempEnvScope

CONFTEST = 'pytest_plugins = ["temp_env_vars.pytest_plugin"]\n'


class TestTempEnvFixture:
    """Test the temp_env fixture in-process."""

    def test_fixture_provides_active_scope(self, temp_env: TempEnvScope) -> None:
        """Test the fixture yields an active scope."""
        assert temp_env.is_active
        temp_env.set("PLUGIN_FIXTURE_VAR", "1")
        assert os.environ["PLUGIN_FIXTURE_VAR"] == "1"

    @pytest.mark.temp_env_vars
    def test_marker_opens_scope(self) -> None:
        """Test a marked test cannot open a second scope in its own thread."""
        with pytest.raises(ScopeContentionError):
            TempEnvScope(blocking=False)


class TestPluginRestoration:
    """Test restoration across tests in a separate pytest run."""

    def test_fixture_restores_between_tests(self, pytester: pytest.Pytester) -> None:
        """Test a variable set through the fixture is gone in the next test."""
        pytester.makeconftest(CONFTEST)
        pytester.makepyfile(
            """
            import os

            def test_set(temp_env):
                os.environ["PLUGIN_PROBE"] = "1"

            def test_unset():
                assert "PLUGIN_PROBE" not in os.environ
            """
        )

        result = pytester.runpytest()
        result.assert_outcomes(passed=2)

    def test_marker_restores_between_tests(self, pytester: pytest.Pytester) -> None:
        """Test a marked test's changes are gone in the next test."""
        pytester.makeconftest(CONFTEST)
        pytester.makepyfile(
            """
            import os
            import pytest

            os.environ["PLUGIN_KEEP"] = "original"

            @pytest.mark.temp_env_vars(timeout=5)
            def test_mutate():
                os.environ["PLUGIN_PROBE"] = "1"
                os.environ["PLUGIN_KEEP"] = "changed"

            def test_check():
                assert "PLUGIN_PROBE" not in os.environ
                assert os.environ["PLUGIN_KEEP"] == "original"
            """
        )

        result = pytester.runpytest()
        result.assert_outcomes(passed=2)

    def test_marker_restores_after_failure(self, pytester: pytest.Pytester) -> None:
        """Test a failing marked test still has its changes undone."""
        pytester.makeconftest(CONFTEST)
        pytester.makepyfile(
            """
            import os
            import pytest

            @pytest.mark.temp_env_vars
            def test_fails():
                os.environ["PLUGIN_PROBE"] = "1"
                assert False

            def test_check():
                assert "PLUGIN_PROBE" not in os.environ
            """
        )

        result = pytester.runpytest()
        result.assert_outcomes(passed=1, failed=1)

    def test_marker_is_registered(self, pytester: pytest.Pytester) -> None:
        """Test the marker is known under --strict-markers."""
        pytester.makeconftest(CONFTEST)
        pytester.makepyfile(
            """
            import pytest

            @pytest.mark.temp_env_vars
            def test_marked():
                pass
            """
        )

        result = pytester.runpytest("--strict-markers")
        result.assert_outcomes(passed=1)
