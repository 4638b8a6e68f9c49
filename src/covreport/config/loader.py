"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority, usually CLI options)
2. Environment variables (COVREPORT__SECTION__KEY)
3. Project config (<project>/.covreport.yaml)
4. Built-in defaults (lowest priority)

Nested sections are merged key by key across sources, so a CLI option for
``job.dry_run`` does not discard ``job.service_name`` from the environment.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from covreport.config.constants import PROJECT_CONFIG_FILE
from covreport.config.models import (
    CovReportConfig,
    DedupConfig,
    JobConfig,
    LoggingConfig,
    OutputConfig,
    ReportsConfig,
    SourcesConfig,
    SubmissionConfig,
)
from covreport.core.errors import ConfigError


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with an instance-bound YAML source."""

    class CovReportSettings(BaseSettings):
        """Root config. Env vars: COVREPORT__LOGGING__LEVEL, COVREPORT__JOB__DRY_RUN, etc."""

        model_config = SettingsConfigDict(
            env_prefix="COVREPORT__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        reports: ReportsConfig = ReportsConfig()
        sources: SourcesConfig = SourcesConfig()
        output: OutputConfig = OutputConfig()
        submission: SubmissionConfig = SubmissionConfig()
        dedup: DedupConfig = DedupConfig()
        job: JobConfig = JobConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return CovReportSettings


def load_config(
    project_dir: Path | None = None,
    *,
    config_file: Path | None = None,
    **kwargs: Any,
) -> CovReportConfig:
    """Load config: defaults < project yaml < env vars < kwargs.

    Args:
        project_dir: Project root holding .covreport.yaml.
                     Defaults to current working directory.
        config_file: Explicit YAML file replacing the project one. Must exist.
        **kwargs: Section overrides, e.g. ``job={"dry_run": True}``.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax, a missing explicit file or
            validation errors.
    """
    project_dir = project_dir or Path.cwd()

    if config_file is not None:
        if not config_file.exists():
            raise ConfigError.file_not_found(str(config_file))
        yaml_config = _load_yaml(config_file)
    else:
        yaml_config = _load_yaml(project_dir / PROJECT_CONFIG_FILE)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    return CovReportConfig.model_validate(settings.model_dump())
