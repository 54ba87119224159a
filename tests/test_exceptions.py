"""Tests for codemode custom exceptions.

Covers the exception hierarchy and structured error information.
"""

import pytest

from codemode.exceptions import (
    CodemodeError,
    ConfigurationError,
    DependencyInstallError,
    ExecutionFaultError,
    FileStagingError,
    MemoryStoreError,
    ProviderError,
    ProvisioningError,
    SandboxError,
    SandboxTimeoutError,
    ToolExecutionError,
)


class TestCodemodeError:
    def test_base_error(self):
        err = CodemodeError("something went wrong")
        assert str(err) == "something went wrong"
        assert err.details == {}

    def test_details(self):
        assert CodemodeError("failed", details={"key": "value"}).details == {"key": "value"}


class TestSandboxErrors:
    @pytest.mark.parametrize(
        "cls,phase",
        [
            (ProvisioningError, "provision"),
            (ExecutionFaultError, "execute"),
        ],
    )
    def test_phase_in_details(self, cls, phase):
        err = cls("boom")
        assert err.phase == phase
        assert err.details["phase"] == phase
        assert isinstance(err, SandboxError)

    def test_dependency_install(self):
        err = DependencyInstallError(["axios", "left-padd"], "404 Not Found")
        assert str(err) == "Dependency installation failed (axios left-padd): 404 Not Found"
        assert err.packages == ["axios", "left-padd"]
        assert err.details["phase"] == "install"

    def test_file_staging(self):
        err = FileStagingError("data.csv", "disk full")
        assert "data.csv" in str(err)
        assert err.path == "data.csv"

    def test_timeout(self):
        err = SandboxTimeoutError(30.0)
        assert str(err) == "Execution exceeded 30.0s limit"
        assert err.details == {"phase": "timeout", "timeout_seconds": 30.0}


class TestOtherErrors:
    def test_tool_execution(self):
        err = ToolExecutionError("exec_ts", "bad input")
        assert "exec_ts" in str(err)
        assert err.tool_name == "exec_ts"

    def test_provider(self):
        err = ProviderError("openrouter", "rate limited")
        assert str(err) == "Provider 'openrouter' error: rate limited"

    def test_configuration(self):
        err = ConfigurationError("CODEMODE_RUNTIME", "unknown")
        assert err.setting == "CODEMODE_RUNTIME"

    @pytest.mark.parametrize(
        "err",
        [
            MemoryStoreError("x"),
            ProviderError("p", "x"),
            ConfigurationError("s", "x"),
            ToolExecutionError("t", "x"),
        ],
    )
    def test_all_inherit_base(self, err):
        assert isinstance(err, CodemodeError)
