"""Application state and configuration."""

from __future__ import annotations

import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from buildchecker.checker.engine import DEFAULT_LOCK_REASON, CheckOptions
from buildchecker.core.base import BaseConfig, BaseState
from buildchecker.core.log import Logger
from buildchecker.core.yaml_settings import (
    CONFIG_FILE_NAME,
    YamlWithIncludesSettingsSource,
)
from buildchecker.team.resolver import Teammate

# Modules usable in {module.attr} templates, e.g. {platformdirs.user_log_dir}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class BuildkiteConfig(BaseConfig):
    """Where builds are fetched from."""

    token: str | None = Field(
        default=None,
        description="Buildkite API token with read_builds scope",
    )
    organization: str = Field(description="Buildkite organization slug")
    pipeline: str = Field(description="Buildkite pipeline slug")
    base_url: str = Field(
        default="https://api.buildkite.com",
        description="Buildkite REST API base URL",
    )


class GitHubConfig(BaseConfig):
    """Repository and branch that get locked."""

    token: str | None = Field(
        default=None,
        description="GitHub token allowed to administer branch protection",
    )
    owner: str = Field(description="Repository owner (user or org)")
    repo: str = Field(description="Repository name")
    branch: str = Field(
        default="main",
        description="Protected branch to lock and unlock",
    )


class CheckConfig(BaseConfig):
    """Lock decision parameters."""

    failures_threshold: int = Field(
        default=3,
        ge=1,
        description="Consecutive failed builds that lock the branch",
    )
    build_timeout: int = Field(
        default=300,
        ge=0,
        description=(
            "Minutes after which an unfinished build counts as failed "
            "(0 disables)"
        ),
    )
    lock_reason: str = Field(
        default=DEFAULT_LOCK_REASON,
        description="Team still allowed to push while the branch is locked",
    )
    builds_limit: int = Field(
        default=99,
        ge=1,
        description="Most recent builds to fetch for a check",
    )

    def options(self, github: GitHubConfig) -> CheckOptions:
        return CheckOptions(
            threshold=self.failures_threshold,
            build_timeout=timedelta(minutes=self.build_timeout),
            repo_owner=github.owner,
            repo_name=github.repo,
            lock_reason=self.lock_reason,
        )


class SlackConfig(BaseConfig):
    """Notification settings."""

    webhook_url: str | None = Field(
        default=None,
        description="Incoming webhook URL; notifications are skipped if unset",
    )


class TeamConfig(BaseConfig):
    """Teammate directory used to mention authors of failed commits."""

    teammates: list[Teammate] = Field(default_factory=list)


class HistoryConfig(BaseConfig):
    """Build history report settings."""

    days: int = Field(
        default=14,
        ge=1,
        description="Days of builds to include in the report",
    )
    output: Path = Field(
        default=Path("buildchecker-history.csv"),
        description="CSV file to write",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance",
    )
    buildkite: BuildkiteConfig
    github: GitHubConfig
    check: CheckConfig = Field(default_factory=CheckConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
    team: TeamConfig = Field(default_factory=TeamConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "buildchecker"
        ),
        description=(
            "Root directory for log files "
            "(supports {platformdirs.*} templates)"
        ),
    )

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Install the global logger from the loaded logger section."""
        from buildchecker.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger()

        setup_logger(
            log_root=self.log_root,
            run_name=f"{self.github.repo}-{self.github.branch}",
            level=self.logger.level,
            console=self.logger.console,
            otlp=self.logger.otlp,
            file=self.logger.file,
            logfire=self.logger.logfire,
        )
        return self

    def close(self):
        from buildchecker.core.log import logger
        logger.close()
        super().close()


# ============================================================
# RUNTIME STATE MODELS (mutated while a command runs)
# ============================================================

class CheckState(BaseState):
    """Runtime state of the check command."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    dry_run: bool = False
    builds: list = Field(
        default_factory=list,
        description="Builds fetched for the branch, newest first",
    )
    results: Any = Field(
        default=None,
        description="CheckResults of the evaluation",
    )
    executed: bool = Field(
        default=False,
        description="Whether the branch action has been executed",
    )
    notified: bool = Field(
        default=False,
        description="Whether a Slack notification was posted",
    )
    status: str = Field(
        default="pending",
        description="pending, locked, unlocked, failed",
    )


class HistoryState(BaseState):
    """Runtime state of the history command."""

    days: int | None = None
    output: Path | None = None
    builds_fetched: int = 0
    status: str = "pending"


class Runtime(BaseModel):
    """Runtime state grouped by command."""

    check: CheckState = Field(default_factory=CheckState)
    history: HistoryState = Field(default_factory=HistoryState)


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Configuration plus runtime state; the object commands receive.

    Sources, highest priority first: init arguments (and CLI flags),
    YAML files (see YamlWithIncludesSettingsSource), .env, environment
    variables (BUILDCHECKER_CONFIG__GITHUB__TOKEN=...), file secrets.
    Values set in any YAML file, package defaults included, win over
    the environment.
    """

    config: Config
    runtime: Runtime = Field(default_factory=Runtime)
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to merge on top of the configuration"
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_FILE_NAME,
        env_file=".env",
        env_prefix="BUILDCHECKER_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Expand {config.*} and {platformdirs.*} templates in every
        string and Path value of the config."""
        self._substitute(self.config)
        return self

    def _substitute(self, obj: Any) -> Any:
        if isinstance(obj, str):
            return self._substitute_string(obj)
        if isinstance(obj, Path):
            return Path(self._substitute_string(str(obj)))
        if isinstance(obj, BaseModel):
            for name in obj.__class__.model_fields:
                value = getattr(obj, name)
                new_value = self._substitute(value)
                if new_value is not value and new_value != value:
                    setattr(obj, name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute(obj[key])
        elif isinstance(obj, list):
            for i, item in enumerate(obj):
                obj[i] = self._substitute(item)
        return obj

    def _substitute_string(self, value: str) -> str:
        """Replace {dotted.path} references.

        "{config.log_root}/history.csv" → "/home/me/.local/state/
        buildchecker/history.csv". Unknown references are left as is.
        """
        def replace(match):
            parts = match.group(1).split(".")
            if parts[0] in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[parts[0]]
                parts = parts[1:]
            else:
                obj = self

            try:
                for part in parts:
                    obj = getattr(obj, part)
                if callable(obj):
                    obj = obj('buildchecker', appauthor=False)
                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([a-z._]+)\}', replace, value)


__all__ = ["State", "Config", "BaseConfig", "BaseState"]
