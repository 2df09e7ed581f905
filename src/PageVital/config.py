# ============================================================================
# PageVital - Configuration Management
#
# Purpose: Load and manage configuration from YAML and env vars
# Inputs: YAML files, environment variables
# Outputs: Config model with all settings
# Dependencies: pyyaml, pydantic, pathlib
# Usage: config = Config.from_default() or Config.from_yaml("path.yaml")
#
# Changelog:
#   2026-09-02: Initial configuration system (collector, baselines, logging)
#   2026-09-09: RegressionConfig with per-metric absolute deltas and the
#               percent-change fallback table
#   2026-09-14: AlertConfig + AlertConfig.merged() for partial runtime updates;
#               invalid fields are dropped instead of failing the whole update
#   2026-09-20: StorageConfig (memory, local_file, sqlite)
# ============================================================================

import math
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from PageVital.errors import ConfigurationError
from PageVital.logging_utils import DEFAULT_FORMAT, get_logger
from PageVital.metrics import Metric, ThresholdMetric

logger = get_logger(__name__)


class CollectorConfig(BaseModel):
    """Collector configuration."""

    slow_resource_threshold_ms: float = 1000.0
    max_slow_resources: int = 10
    default_viewport_width: int = 1920
    default_viewport_height: int = 1080


class BaselineConfig(BaseModel):
    """Baseline store configuration."""

    max_baselines: int = Field(default=100, ge=1)
    storage_key: str = "performance-baselines"


class MetricThreshold(BaseModel):
    """A warning/critical pair. Used for absolute deltas and alert thresholds."""

    warning: float
    critical: float

    @field_validator("warning", "critical", mode="before")
    @classmethod
    def _finite_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("threshold must be a number")
        if not math.isfinite(value):
            raise ValueError("threshold must be finite")
        return value


def _default_deltas() -> Dict[Metric, MetricThreshold]:
    return {
        Metric.CLS: MetricThreshold(warning=0.05, critical=0.1),
        Metric.LCP: MetricThreshold(warning=500.0, critical=1000.0),
        Metric.FID: MetricThreshold(warning=50.0, critical=100.0),
        Metric.FCP: MetricThreshold(warning=300.0, critical=600.0),
        Metric.TTFB: MetricThreshold(warning=200.0, critical=400.0),
    }


class RegressionConfig(BaseModel):
    """Regression detection thresholds.

    A worsening is reported only when its percent change reaches
    min_change_percent. Severity comes from the metric's absolute deltas when
    defined, otherwise from percent_warning / percent_critical.
    """

    min_change_percent: float = 10.0
    percent_warning: float = 20.0
    percent_critical: float = 50.0
    deltas: Dict[Metric, MetricThreshold] = Field(default_factory=_default_deltas)


class AlertThresholds(BaseModel):
    """Alert thresholds per metric. score is inverted (lower is worse)."""

    cls: MetricThreshold = Field(default_factory=lambda: MetricThreshold(warning=0.1, critical=0.25))
    lcp: MetricThreshold = Field(default_factory=lambda: MetricThreshold(warning=2500.0, critical=4000.0))
    fid: MetricThreshold = Field(default_factory=lambda: MetricThreshold(warning=100.0, critical=300.0))
    fcp: MetricThreshold = Field(default_factory=lambda: MetricThreshold(warning=1800.0, critical=3000.0))
    ttfb: MetricThreshold = Field(default_factory=lambda: MetricThreshold(warning=800.0, critical=1800.0))
    score: MetricThreshold = Field(default_factory=lambda: MetricThreshold(warning=75.0, critical=50.0))

    def for_metric(self, metric: ThresholdMetric) -> MetricThreshold:
        return getattr(self, metric.value)


class ChannelConfig(BaseModel):
    """Alert channel toggles. webhook is a URL; None disables the channel."""

    console: bool = Field(default=True, strict=True)
    storage: bool = Field(default=True, strict=True)
    webhook: Optional[str] = None

    @field_validator("webhook")
    @classmethod
    def _http_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("webhook must be an http(s) URL")
        return value


def _ordered(metric: ThresholdMetric, threshold: MetricThreshold) -> bool:
    if metric.inverted:
        return threshold.warning >= threshold.critical
    return threshold.warning <= threshold.critical


class AlertConfig(BaseModel):
    """Alert system configuration."""

    enabled: bool = Field(default=True, strict=True)
    thresholds: AlertThresholds = Field(default_factory=AlertThresholds)
    channels: ChannelConfig = Field(default_factory=ChannelConfig)
    history_limit: int = Field(default=100, ge=1)
    storage_key: str = "performance-alert-history"
    webhook_timeout_s: float = Field(default=5.0, gt=0)
    webhook_retries: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _thresholds_ordered(self) -> "AlertConfig":
        for metric in ThresholdMetric:
            if not _ordered(metric, self.thresholds.for_metric(metric)):
                raise ValueError(f"{metric.value}: warning and critical thresholds are out of order")
        return self

    def merged(self, partial: Any) -> "AlertConfig":
        """
        Deep-merge a partial update into a copy of this config.

        Unknown keys, wrongly typed values and out-of-order threshold pairs are
        dropped individually; every valid field in the update is still applied.
        ``notifications`` is accepted as an alias for ``channels``.

        Returns:
            New AlertConfig (self is never modified)
        """
        if not isinstance(partial, Mapping):
            logger.debug(f"Ignoring non-mapping alert config update: {type(partial).__name__}")
            return self

        data: Dict[str, Any] = self.model_dump()
        for raw_key, value in partial.items():
            key = "channels" if raw_key == "notifications" else raw_key
            if key == "thresholds":
                data["thresholds"] = self._merge_thresholds(value).model_dump()
            elif key == "channels":
                data["channels"] = self._merge_channels(value).model_dump()
            elif key in AlertConfig.model_fields:
                candidate = {**data, key: value}
                try:
                    AlertConfig.model_validate(candidate)
                except ValidationError:
                    logger.debug(f"Dropping invalid alert config field {key!r}={value!r}")
                    continue
                data[key] = value
            else:
                logger.debug(f"Dropping unknown alert config field {raw_key!r}")

        return AlertConfig.model_validate(data)

    def _merge_thresholds(self, update: Any) -> AlertThresholds:
        if not isinstance(update, Mapping):
            logger.debug("Dropping non-mapping thresholds update")
            return self.thresholds

        merged = self.thresholds.model_dump()
        for name, pair in update.items():
            try:
                metric = ThresholdMetric(name)
            except ValueError:
                logger.debug(f"Dropping thresholds for unknown metric {name!r}")
                continue
            if not isinstance(pair, Mapping):
                logger.debug(f"Dropping non-mapping thresholds for {name!r}")
                continue
            candidate = dict(merged[metric.value])
            for bound in ("warning", "critical"):
                if bound not in pair:
                    continue
                try:
                    MetricThreshold.model_validate({**candidate, bound: pair[bound]})
                except ValidationError:
                    logger.debug(f"Dropping invalid {name}.{bound}={pair[bound]!r}")
                    continue
                candidate[bound] = pair[bound]
            threshold = MetricThreshold.model_validate(candidate)
            if not _ordered(metric, threshold):
                logger.debug(f"Dropping out-of-order thresholds for {name!r}: {candidate}")
                continue
            merged[metric.value] = candidate

        return AlertThresholds.model_validate(merged)

    def _merge_channels(self, update: Any) -> ChannelConfig:
        if not isinstance(update, Mapping):
            logger.debug("Dropping non-mapping channels update")
            return self.channels

        merged = self.channels.model_dump()
        for name, value in update.items():
            if name not in ChannelConfig.model_fields:
                logger.debug(f"Dropping unknown channel {name!r}")
                continue
            try:
                ChannelConfig.model_validate({**merged, name: value})
            except ValidationError:
                logger.debug(f"Dropping invalid channel setting {name!r}={value!r}")
                continue
            merged[name] = value

        return ChannelConfig.model_validate(merged)


class StorageConfig(BaseModel):
    """Key-value store backing baselines and alert history."""

    type: Literal["memory", "local_file", "sqlite"] = "memory"
    path: str = "runs/pagevital"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = DEFAULT_FORMAT


class Config(BaseModel):
    """Root configuration object."""

    collector: CollectorConfig = Field(default_factory=CollectorConfig)
    baselines: BaselineConfig = Field(default_factory=BaselineConfig)
    regression: RegressionConfig = Field(default_factory=RegressionConfig)
    alerts: AlertConfig = Field(default_factory=AlertConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """
        Load configuration from a YAML file with environment variable overrides.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            ConfigurationError: If the file is missing, not valid YAML, or fails validation
        """
        yaml_path = Path(path)
        if not yaml_path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(yaml_path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Config file is not valid YAML: {path}", details=str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")

        data = cls._apply_env_overrides(data)

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}", details=str(e)) from e

    @classmethod
    def from_default(cls) -> "Config":
        """
        Load configuration from the default config file.

        Returns:
            Config instance
        """
        package_root = Path(__file__).parent.parent.parent
        default_config = package_root / "configs" / "default.yaml"

        if default_config.exists():
            return cls.from_yaml(str(default_config))

        data = cls._apply_env_overrides({})
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError("Invalid configuration from environment", details=str(e)) from e

    @classmethod
    def _apply_env_overrides(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        Environment variables follow the pattern:
        PAGEVITAL_<SECTION>_<KEY>=value

        Section and field names may contain underscores, so names are matched
        against the model fields rather than split on ``_``.

        Examples:
            PAGEVITAL_ALERTS_ENABLED=false            → data["alerts"]["enabled"]
            PAGEVITAL_BASELINES_MAX_BASELINES=50      → data["baselines"]["max_baselines"]
            PAGEVITAL_ALERTS_CHANNELS_WEBHOOK=https://... → data["alerts"]["channels"]["webhook"]

        Args:
            data: Configuration dictionary

        Returns:
            Updated configuration dictionary
        """
        prefix = "PAGEVITAL_"

        section_keys = sorted(cls.model_fields.keys(), key=len, reverse=True)

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            remainder = env_key[len(prefix) :].lower()

            for section in section_keys:
                section_prefix = section + "_"
                if not remainder.startswith(section_prefix):
                    continue

                rest = remainder[len(section_prefix) :]
                section_data = data.setdefault(section, {})
                if not isinstance(section_data, dict):
                    break

                section_model = cls.model_fields[section].annotation
                section_fields = getattr(section_model, "model_fields", {})
                if rest in section_fields:
                    section_data[rest] = cls._parse_env_value(env_value)
                else:
                    for sub_key in sorted(section_fields, key=len, reverse=True):
                        sub_prefix = sub_key + "_"
                        if not rest.startswith(sub_prefix):
                            continue
                        sub_data = section_data.setdefault(sub_key, {})
                        if isinstance(sub_data, dict):
                            sub_data[rest[len(sub_prefix) :]] = cls._parse_env_value(env_value)
                        break
                break

        return data

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """
        Parse environment variable value to appropriate type.

        Args:
            value: String value from environment

        Returns:
            Parsed value (str, int, float, or bool)
        """
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value
