"""
Sandbox environment forwarding.

Only credentials and endpoint settings the generated program is meant to
use cross into the sandbox. Everything else in the host environment stays
on the host, including unrelated secrets.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

ARGS_ENV_VAR = "ARGS_JSON"


class ForwardRules(BaseModel):
    """Name patterns for host variables forwarded into the sandbox."""

    suffixes: list[str] = Field(default_factory=lambda: ["_API_KEY"])
    prefixes: list[str] = Field(default_factory=lambda: ["API_KEY_", "BASE_URL_"])

    def matches(self, name: str) -> bool:
        return name.endswith(tuple(self.suffixes)) or name.startswith(tuple(self.prefixes))


DEFAULT_FORWARD_RULES = ForwardRules()


def filter_environment(
    source: Mapping[str, str],
    rules: ForwardRules = DEFAULT_FORWARD_RULES,
) -> dict[str, str]:
    """Return the subset of ``source`` whose names match ``rules``.

    Pure: the caller decides which mapping to scan (normally ``os.environ``).
    """
    return {name: value or "" for name, value in source.items() if rules.matches(name)}


def build_sandbox_env(
    source: Mapping[str, str],
    arguments: Any = None,
    rules: ForwardRules = DEFAULT_FORWARD_RULES,
) -> dict[str, str]:
    """Filtered environment plus the JSON-encoded invocation arguments.

    ``ARGS_JSON`` is set whenever arguments were supplied (not None), so a
    program can always tell "no arguments" from "empty arguments".
    """
    envs = filter_environment(source, rules)
    if arguments is not None:
        envs[ARGS_ENV_VAR] = json.dumps(arguments)
    return envs
