"""
Codemode Settings

Process-wide configuration read once from the environment at startup.
The execution adapter never reads these itself; the CLI (or any other
entry point) builds the collaborators from a Settings instance.

Environment:
    E2B_API_KEY                 sandbox provider credential
    OPENROUTER_API_KEY          LLM credential for the default provider
    ANTHROPIC_API_KEY           LLM credential when CODEMODE_PROVIDER=claude
    OPENAI_API_KEY              LLM credential when CODEMODE_PROVIDER=openai
    CODEMODE_ENV / NODE_ENV     "production" selects PostgreSQL memory
    DATABASE_URL                PostgreSQL connection string
    CODEMODE_PROVIDER           openrouter | claude | openai
    CODEMODE_MODEL              model override
    CODEMODE_RUNTIME            typescript | python
    CODEMODE_SANDBOX_TIMEOUT    wall-clock budget in seconds (default 30)
    CODEMODE_MEMORY_DB          SQLite path for local memory
    CODEMODE_LOG_LEVEL          DEBUG | INFO | WARNING | ...
    CODEMODE_LOG_JSON           1/true for JSON log lines
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError

from codemode.exceptions import ConfigurationError

PROVIDER_KEY_VARS = {
    "openrouter": "OPENROUTER_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Resolved process configuration."""

    e2b_api_key: str | None = None
    provider: str = "openrouter"
    llm_api_key: str | None = None
    model: str | None = None
    environment: str = "development"
    database_url: str | None = None
    memory_db: str = "codemode-memory.db"
    runtime: str = "typescript"
    sandbox_timeout: float = Field(default=30.0, ge=1.0, le=3600.0)
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def memory_url(self) -> str:
        """PostgreSQL in production when DATABASE_URL is set, local SQLite otherwise."""
        if self.is_production and self.database_url:
            return self.database_url
        return self.memory_db

    @property
    def llm_key_var(self) -> str:
        return PROVIDER_KEY_VARS.get(self.provider.lower(), "OPENROUTER_API_KEY")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ConfigurationError: if a value cannot be parsed.
        """
        env = os.environ if environ is None else environ
        provider = env.get("CODEMODE_PROVIDER", "openrouter").lower()
        if provider not in PROVIDER_KEY_VARS:
            raise ConfigurationError(
                "CODEMODE_PROVIDER",
                f"unknown provider '{provider}' (expected one of: openrouter, claude, openai)",
            )

        values: dict = {
            "e2b_api_key": env.get("E2B_API_KEY"),
            "provider": provider,
            "llm_api_key": env.get(PROVIDER_KEY_VARS[provider]),
            "model": env.get("CODEMODE_MODEL"),
            "environment": env.get("CODEMODE_ENV") or env.get("NODE_ENV") or "development",
            "database_url": env.get("DATABASE_URL"),
            "runtime": env.get("CODEMODE_RUNTIME", "typescript"),
            "log_level": env.get("CODEMODE_LOG_LEVEL", "INFO"),
            "log_json": env.get("CODEMODE_LOG_JSON", "").lower() in _TRUTHY,
        }
        if env.get("CODEMODE_MEMORY_DB"):
            values["memory_db"] = env["CODEMODE_MEMORY_DB"]
        if env.get("CODEMODE_SANDBOX_TIMEOUT"):
            values["sandbox_timeout"] = env["CODEMODE_SANDBOX_TIMEOUT"]

        try:
            return cls(**values)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(p) for p in error["loc"])
            raise ConfigurationError(field, error["msg"]) from e
