"""
settings_loader.py

Configuration management for the Clustering Simulator.
Loads and validates settings from YAML configuration with environment variable substitution.

Features:
- YAML configuration loading with validation
- Environment variable substitution (${VAR_NAME} syntax)
- Cached settings shared by the CLI and the simulator
- Type-safe configuration with Pydantic models
- Built-in defaults when no configuration file is present
"""

import os
import re
import yaml
import logging
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator
from pathlib import Path

from clustersim.schemas.data_models import ClusterAlgorithm, DatasetType
from clustersim.utils.error_handling import ConfigurationError, InvalidAlgorithmError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models (Pydantic)
# =============================================================================

class ServiceSettings(BaseModel):
    """General service settings."""
    name: str = Field(default="clustersim", description="Service name")
    version: str = Field(default="1.0.0", description="Service version")
    environment: str = Field(default="development", description="Environment (development, production)")


class KMeansSettings(BaseModel):
    """K-Means clustering algorithm settings."""
    n_clusters: int = Field(default=3, description="Number of clusters (k)")
    max_iter: int = Field(default=100, ge=0, description="Maximum refinement rounds")
    random_state: Optional[int] = Field(default=None, description="Random seed (null = non-deterministic)")


class DBSCANSettings(BaseModel):
    """DBSCAN clustering algorithm settings."""
    epsilon: float = Field(default=40.0, description="Neighborhood radius")
    min_pts: int = Field(default=5, description="Minimum neighbors for a dense point")


class HDBSCANSettings(BaseModel):
    """HDBSCAN clustering algorithm settings."""
    min_cluster_size: int = Field(default=3, description="Minimum cluster size")
    min_samples: int = Field(default=5, ge=1, description="Neighbor rank for core distance")


class AgglomerativeSettings(BaseModel):
    """Agglomerative clustering algorithm settings."""
    n_clusters: int = Field(default=3, description="Number of clusters")


class ClusteringAlgorithmsSettings(BaseModel):
    """Algorithm-specific settings."""
    kmeans: KMeansSettings = Field(default_factory=KMeansSettings)
    dbscan: DBSCANSettings = Field(default_factory=DBSCANSettings)
    hdbscan: HDBSCANSettings = Field(default_factory=HDBSCANSettings)
    agglomerative: AgglomerativeSettings = Field(default_factory=AgglomerativeSettings)


class ParameterRangesSettings(BaseModel):
    """Suggested parameter ranges, used for advisory validation."""
    n_clusters: List[float] = Field(default_factory=lambda: [2, 10])
    epsilon: List[float] = Field(default_factory=lambda: [10, 100])
    min_pts: List[float] = Field(default_factory=lambda: [2, 10])
    min_cluster_size: List[float] = Field(default_factory=lambda: [2, 10])
    min_samples: List[float] = Field(default_factory=lambda: [2, 10])

    @field_validator("*")
    @classmethod
    def check_range(cls, value: List[float]) -> List[float]:
        if len(value) != 2 or value[0] > value[1]:
            raise ValueError("Range must be [min, max] with min <= max")
        return value

    def as_dict(self) -> Dict[str, tuple]:
        return {name: tuple(bounds) for name, bounds in self.model_dump().items()}


class ClusteringSettings(BaseModel):
    """Main clustering configuration."""
    default_algorithm: str = Field(default="kmeans", description="Default clustering algorithm")
    algorithms: ClusteringAlgorithmsSettings = Field(default_factory=ClusteringAlgorithmsSettings)
    parameter_ranges: ParameterRangesSettings = Field(default_factory=ParameterRangesSettings)

    @field_validator("default_algorithm")
    @classmethod
    def check_algorithm(cls, value: str) -> str:
        value = value.lower()
        if value not in {member.value for member in ClusterAlgorithm}:
            raise ValueError(f"Unknown algorithm '{value}'")
        return value


class DatasetSettings(BaseModel):
    """Synthetic dataset configuration."""
    default_type: str = Field(default="random", description="Default dataset generator")
    num_points: int = Field(default=200, ge=0, description="Number of points to generate")
    width: float = Field(default=800.0, gt=0, description="Canvas width")
    height: float = Field(default=600.0, gt=0, description="Canvas height")
    random_state: Optional[int] = Field(default=None, description="Random seed for generators")

    @field_validator("default_type")
    @classmethod
    def check_type(cls, value: str) -> str:
        value = value.lower()
        if value not in {member.value for member in DatasetType}:
            raise ValueError(f"Unknown dataset '{value}'")
        return value


class PerformanceSettings(BaseModel):
    """Size thresholds above which the quadratic/cubic algorithms warn."""
    dbscan_warning_points: int = Field(default=5000, ge=1)
    agglomerative_warning_points: int = Field(default=2000, ge=1)


class FileLoggingSettings(BaseModel):
    """File logging configuration."""
    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(default="logs/clustersim.log", description="Log file path")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="console", description="Log format (json or console)")
    file: FileLoggingSettings = Field(default_factory=FileLoggingSettings)

    @field_validator("level")
    @classmethod
    def check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level '{value}'")
        return value


class Settings(BaseModel):
    """Root configuration model."""
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    clustering: ClusteringSettings = Field(default_factory=ClusteringSettings)
    datasets: DatasetSettings = Field(default_factory=DatasetSettings)
    performance: PerformanceSettings = Field(default_factory=PerformanceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def algorithm_params(self, algorithm: str) -> Dict[str, Any]:
        """Default parameters for one algorithm, including size thresholds."""
        algorithm = algorithm.lower()
        if algorithm not in ClusteringAlgorithmsSettings.model_fields:
            raise InvalidAlgorithmError(
                f"Unsupported algorithm '{algorithm}'. "
                f"Supported: {list(ClusteringAlgorithmsSettings.model_fields)}",
                details={"algorithm": algorithm},
            )
        params = getattr(self.clustering.algorithms, algorithm).model_dump()
        if algorithm == "dbscan":
            params["scaling_warning_threshold"] = self.performance.dbscan_warning_points
        elif algorithm == "agglomerative":
            params["scaling_warning_threshold"] = self.performance.agglomerative_warning_points
        return params


# =============================================================================
# Environment Substitution
# =============================================================================

ENV_CONFIG_PATH = "CLUSTERSIM_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# ${NAME} or ${NAME:default}
_ENV_PATTERN = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]*))?\}")


def substitute_env_vars(value: Any) -> Any:
    """Expand ${NAME} / ${NAME:default} in every string of a parsed YAML tree."""
    if isinstance(value, dict):
        return {key: substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(
            lambda match: os.getenv(match.group("name"), match.group("default") or ""),
            value,
        )
    return value


# =============================================================================
# Configuration Manager
# =============================================================================

class ConfigManager:
    """
    Process-wide cache of the validated Settings.

    Lookup order when no path is given: $CLUSTERSIM_CONFIG, then
    config/settings.yaml relative to the working directory, then the built-in
    defaults of the Settings model.
    """

    _settings: Optional[Settings] = None

    @classmethod
    def load_config(cls, config_path: Optional[str] = None) -> Settings:
        """
        Load and cache settings, returning the cached copy when present.

        Args:
            config_path: Explicit YAML file; must exist when given

        Returns:
            Validated Settings

        Raises:
            FileNotFoundError: If config_path does not exist
            ConfigurationError: If the YAML cannot be parsed or validated
        """
        if cls._settings is not None:
            return cls._settings

        path = cls._resolve_path(config_path)
        if path is None:
            logger.warning("No configuration file found, using built-in defaults")
            cls._settings = Settings()
        else:
            cls._settings = cls._read(path)
        return cls._settings

    @classmethod
    def get_settings(cls) -> Settings:
        return cls._settings if cls._settings is not None else cls.load_config()

    @classmethod
    def reload_config(cls, config_path: Optional[str] = None) -> Settings:
        """Drop the cached settings and load again."""
        cls._settings = None
        return cls.load_config(config_path)

    @staticmethod
    def _resolve_path(config_path: Optional[str]) -> Optional[Path]:
        if config_path is not None:
            path = Path(config_path)
            if not path.is_file():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return path

        candidates = [Path(os.environ[ENV_CONFIG_PATH])] if os.getenv(ENV_CONFIG_PATH) else []
        candidates.append(DEFAULT_CONFIG_PATH)
        return next((path for path in candidates if path.is_file()), None)

    @staticmethod
    def _read(path: Path) -> Settings:
        logger.info(f"Loading configuration from: {path}")

        try:
            raw_config = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {path}: {e}",
                details={"path": str(path)},
            ) from e

        if not isinstance(raw_config, dict):
            raise ConfigurationError(
                f"Expected a mapping at the top of {path}",
                details={"path": str(path)},
            )

        try:
            settings = Settings.model_validate(substitute_env_vars(raw_config))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {path}: {e}",
                details={"path": str(path), "errors": e.error_count()},
            ) from e

        logger.info("Configuration loaded and validated successfully")
        return settings


def get_settings() -> Settings:
    """Cached application settings."""
    return ConfigManager.get_settings()
