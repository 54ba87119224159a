"""
Runtime profiles for sandboxed programs.

A profile bundles the per-language constants the adapter needs: the
language tag the sandbox runs the code with, the source file extension,
the package manager command, the working directory and the file names
that belong to the environment rather than to the program's output.
"""

from __future__ import annotations

import shlex

from pydantic import BaseModel, Field

SHELL_DOTFILES = [".bashrc", ".bash_logout", ".profile"]


class RuntimeProfile(BaseModel):
    """Language-specific settings for one sandbox runtime."""

    name: str
    language: str
    extension: str
    install_command: list[str]
    workdir: str = "/home/user"
    excluded_files: list[str] = Field(default_factory=list)

    def install_line(self, packages: list[str]) -> str:
        """Single shell command installing every package in one batch."""
        return shlex.join([*self.install_command, *packages])

    def path_for(self, relative_path: str) -> str:
        return f"{self.workdir.rstrip('/')}/{relative_path.lstrip('/')}"

    def is_output_file(self, name: str) -> bool:
        """True for files that should be returned to the caller."""
        return name not in self.excluded_files and not name.endswith(self.extension)


TYPESCRIPT = RuntimeProfile(
    name="typescript",
    language="ts",
    extension=".ts",
    install_command=["npm", "install"],
    excluded_files=[*SHELL_DOTFILES, "package.json", "package-lock.json"],
)

PYTHON = RuntimeProfile(
    name="python",
    language="python",
    extension=".py",
    install_command=["pip", "install", "--quiet"],
    excluded_files=[*SHELL_DOTFILES, "requirements.txt"],
)

RUNTIMES: dict[str, RuntimeProfile] = {
    TYPESCRIPT.name: TYPESCRIPT,
    PYTHON.name: PYTHON,
}


def get_runtime(name: str) -> RuntimeProfile:
    """Look up a built-in runtime profile by name."""
    try:
        return RUNTIMES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown runtime: {name}. Supported: {', '.join(sorted(RUNTIMES))}"
        ) from None
