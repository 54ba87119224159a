"""
Codemode Core Data Models

Request-scoped types shared by the execution adapter, the exec tool and
the agent loop. Nothing here outlives a single adapter invocation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# ─── Enums ───────────────────────────────────────────────────

class Checkpoint(str, Enum):
    """Pipeline checkpoints reported to execution observers."""
    PROVISIONED = "PROVISIONED"
    DEPENDENCIES_INSTALLED = "DEPENDENCIES_INSTALLED"
    EXECUTED = "EXECUTED"
    COLLECTED = "COLLECTED"
    TORN_DOWN = "TORN_DOWN"


class CollectionStatus(str, Enum):
    """Outcome of the output-file collection phase.

    EMPTY and UNAVAILABLE both yield no output files on the result;
    the distinction is only reported to observers and logs.
    """
    COLLECTED = "COLLECTED"
    EMPTY = "EMPTY"
    UNAVAILABLE = "UNAVAILABLE"


# ─── Execution ───────────────────────────────────────────────

class ExecutionRequest(BaseModel):
    """One program to run in a fresh sandbox."""

    program: str = Field(min_length=1)
    dependencies: list[str] = Field(default_factory=list)
    files: dict[str, str] = Field(default_factory=dict)
    arguments: Any = None


class FileCollection(BaseModel):
    """Files read back from the sandbox working directory."""

    status: CollectionStatus = CollectionStatus.EMPTY
    files: dict[str, str] = Field(default_factory=dict)
    error: str | None = None

    @classmethod
    def unavailable(cls, error: str) -> FileCollection:
        return cls(status=CollectionStatus.UNAVAILABLE, error=error)

    @classmethod
    def from_files(cls, files: dict[str, str]) -> FileCollection:
        status = CollectionStatus.COLLECTED if files else CollectionStatus.EMPTY
        return cls(status=status, files=files)

    def as_output_files(self) -> dict[str, str] | None:
        """Files for ExecutionResult.output_files; None unless something was collected."""
        if self.status == CollectionStatus.COLLECTED and self.files:
            return dict(self.files)
        return None


class ExecutionResult(BaseModel):
    """Structured outcome of one adapter invocation.

    Serialized for the agent with camelCase keys (resultValue, outputFiles,
    errorMessage). Absent optional fields are dropped, so "no files" and
    "empty file set" never look the same on the wire.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    stdout: str = ""
    stderr: str = ""
    result_value: Any = None
    output_files: dict[str, str] | None = None
    error_message: str | None = None

    @model_validator(mode="after")
    def _error_excludes_result(self) -> ExecutionResult:
        if self.error_message is not None and self.result_value is not None:
            raise ValueError("result_value must be absent when error_message is set")
        if self.output_files == {}:
            self.output_files = None
        return self

    @property
    def ok(self) -> bool:
        return self.error_message is None

    @classmethod
    def failure(cls, message: str) -> ExecutionResult:
        """Result for a fatal pipeline failure: empty stdout, message on stderr."""
        return cls(stdout="", stderr=message, error_message=message)

    def to_wire(self) -> dict[str, Any]:
        """Dict with camelCase keys and without absent optional fields."""
        data = self.model_dump(by_alias=True)
        for key in ("resultValue", "outputFiles", "errorMessage"):
            if data.get(key) is None:
                data.pop(key, None)
        return data
