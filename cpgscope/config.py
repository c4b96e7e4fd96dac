"""Configuration management for cpgscope.

Configuration Priority Chain (highest to lowest):
1. Explicit arguments passed to GraphAnalyzer methods
2. Environment variables (logging only)
3. Config file (.cpgscoperc, cpgscope.toml)
4. Built-in defaults

Config files are searched hierarchically:
1. Current directory
2. Parent directories (up to root)
3. User home directory (~/.cpgscoperc or ~/.config/cpgscope.toml)

Environment Variable Names:
- CPGSCOPE_LOG_LEVEL
- CPGSCOPE_LOG_FORMAT
- CPGSCOPE_LOG_FILE

Example .cpgscoperc (YAML):
```yaml
centrality:
  damping: 0.85
  max_workers: 4

paths:
  goal: performance
  critical_path_max_depth: 10

impact:
  depth: 3
  dependency_types: [call_graph, module_dependency]

communities:
  algorithm: louvain

detectors:
  enabled: [god_object, cyclic_dependencies]
  thresholds:
    degree_high: 0.8
    fanout: 5

logging:
  level: INFO
  format: human
  file: ${CPGSCOPE_HOME}/cpgscope.log
```

Example cpgscope.toml:
```toml
[centrality]
damping = 0.85

[communities]
algorithm = "label_propagation"

[detectors.thresholds]
community_spread = 3

[logging]
level = "DEBUG"
format = "json"
```
"""

import json
import math
import os
import re
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from cpgscope.detectors.base import SmellThresholds
from cpgscope.logging_config import configure_logging, get_logger
from cpgscope.models import CommunityAlgorithm, EdgeKind, SmellType
from cpgscope.semantic.weights import GOAL_PRESETS, SemanticContext, SemanticWeights

logger = get_logger(__name__)

CONFIG_FILE_NAMES = (".cpgscoperc", "cpgscope.toml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("human", "json")


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""
    pass


@dataclass
class CentralityConfig:
    """Centrality configuration."""
    damping: float = 0.85
    max_iterations: int = 100
    tolerance: float = 1e-6
    max_workers: Optional[int] = None  # threads for betweenness, None = inline
    top_n: int = 10


@dataclass
class PathConfig:
    """Shortest path and critical path configuration.

    ``goal`` selects a preset cost model; explicit penalties and costs are
    layered on top of it.
    """
    max_depth: Optional[int] = None
    critical_path_max_depth: int = 10
    max_candidate_paths: int = 64
    goal: Optional[str] = None
    node_type_penalties: Dict[str, float] = field(default_factory=dict)
    edge_type_costs: Dict[str, float] = field(default_factory=dict)

    def semantic_context(self) -> SemanticContext:
        """Cost model described by this section."""
        base = SemanticContext.for_goal(self.goal) if self.goal else SemanticContext()
        weights = SemanticWeights(
            node_type_penalties={**base.weights.node_type_penalties, **self.node_type_penalties},
            edge_type_costs={**base.weights.edge_type_costs, **self.edge_type_costs},
        )
        return SemanticContext(goal=base.goal, weights=weights)


@dataclass
class ImpactConfig:
    """Dependency impact analysis configuration."""
    depth: int = 3
    dependency_types: Optional[List[str]] = None  # None = all edge kinds


@dataclass
class CommunityConfig:
    """Community detection configuration."""
    algorithm: str = CommunityAlgorithm.LOUVAIN.value
    max_iterations: int = 100


@dataclass
class DetectorConfig:
    """Smell detector configuration."""
    enabled: Optional[List[str]] = None  # None = all smells
    thresholds: SmellThresholds = field(default_factory=SmellThresholds)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "human"  # "human" or "json"
    file: Optional[str] = None

    def apply(self) -> None:
        """Configure the cpgscope logger hierarchy from this section."""
        configure_logging(
            level=self.level,
            json_output=self.format == "json",
            log_file=self.file,
        )


def _section(cls, data: Any, name: str):
    """Build a config section dataclass, reporting unknown keys as ConfigError."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in config section '{name}': {', '.join(unknown)}")
    return cls(**data)


def _parse_detector_config(data: Any) -> DetectorConfig:
    """Parse detector configuration with nested thresholds."""
    if data is None:
        return DetectorConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config section 'detectors' must be a mapping")
    data = dict(data)
    try:
        thresholds = SmellThresholds.from_dict(data.pop("thresholds", None))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid detector thresholds: {e}")
    detector_config = _section(DetectorConfig, data, "detectors")
    detector_config.thresholds = thresholds
    return detector_config


@dataclass
class CPGScopeConfig:
    """Complete cpgscope configuration."""
    centrality: CentralityConfig = field(default_factory=CentralityConfig)
    paths: PathConfig = field(default_factory=PathConfig)
    impact: ImpactConfig = field(default_factory=ImpactConfig)
    communities: CommunityConfig = field(default_factory=CommunityConfig)
    detectors: DetectorConfig = field(default_factory=DetectorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CPGScopeConfig":
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            CPGScopeConfig instance

        Raises:
            ConfigError: If a section is malformed or has unknown keys
        """
        data = _expand_env_vars(data or {})
        unknown = sorted(set(data) - {f.name for f in fields(cls)})
        if unknown:
            raise ConfigError(f"Unknown config sections: {', '.join(unknown)}")

        return cls(
            centrality=_section(CentralityConfig, data.get("centrality"), "centrality"),
            paths=_section(PathConfig, data.get("paths"), "paths"),
            impact=_section(ImpactConfig, data.get("impact"), "impact"),
            communities=_section(CommunityConfig, data.get("communities"), "communities"),
            detectors=_parse_detector_config(data.get("detectors")),
            logging=_section(LoggingConfig, data.get("logging"), "logging"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Configuration as dictionary
        """
        return asdict(self)

    def merge(self, other: "CPGScopeConfig") -> "CPGScopeConfig":
        """Merge with another config (other takes precedence).

        Only values of ``other`` that differ from the built-in defaults
        override this config.

        Args:
            other: Config to merge with

        Returns:
            New merged config
        """
        overrides = _changed_values(other.to_dict(), CPGScopeConfig().to_dict())
        return CPGScopeConfig.from_dict(_deep_merge_dicts(self.to_dict(), overrides))


def _changed_values(data: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Keep the entries of ``data`` that differ from ``defaults``, recursing into mappings."""
    changed: Dict[str, Any] = {}
    for key, value in data.items():
        default = defaults.get(key)
        if isinstance(value, dict) and isinstance(default, dict) and default:
            nested = _changed_values(value, default)
            if nested:
                changed[key] = nested
        elif value != default:
            changed[key] = value
    return changed


def _expand_env_vars(data: Union[Dict, list, str, Any]) -> Any:
    """Recursively expand environment variables in config data.

    Supports ${VAR_NAME} and $VAR_NAME syntax. Unset variables are left as-is.

    Args:
        data: Configuration data (dict, list, str, or primitive)

    Returns:
        Data with environment variables expanded
    """
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = re.compile(r'\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)')

        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return pattern.sub(replace_var, data)
    else:
        return data


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find config file using hierarchical search.

    Searches in order:
    1. start_dir (or current directory)
    2. Parent directories up to root
    3. User home directory (~/.cpgscoperc, then ~/.config/cpgscope.toml)

    Args:
        start_dir: Starting directory for search (default: current directory)

    Returns:
        Path to config file, or None if not found
    """
    current = Path.cwd() if start_dir is None else Path(start_dir).resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            candidate = current / name
            if candidate.is_file():
                logger.info(f"Found config file: {candidate}")
                return candidate

        parent = current.parent
        if parent == current:  # Reached root
            break
        current = parent

    home = Path.home()
    for candidate in (home / ".cpgscoperc", home / ".config" / "cpgscope.toml"):
        if candidate.is_file():
            logger.info(f"Found config file: {candidate}")
            return candidate

    logger.debug("No config file found")
    return None


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from file.

    Supports:
    - .cpgscoperc, *.yaml, *.yml (YAML, which also accepts JSON)
    - *.json (JSON)
    - *.toml (TOML)

    Args:
        file_path: Path to config file

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If file cannot be parsed or format not supported
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise ConfigError(f"Config file not found: {file_path}")

    try:
        content = file_path.read_text()
    except OSError as e:
        raise ConfigError(f"Failed to read config file {file_path}: {e}")

    if file_path.suffix == ".toml":
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse TOML config {file_path}: {e}")
        logger.debug(f"Loaded TOML config from {file_path}")
        return data

    if file_path.suffix == ".json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse JSON config {file_path}: {e}")
        logger.debug(f"Loaded JSON config from {file_path}")
        return data or {}

    if file_path.name == ".cpgscoperc" or file_path.suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {file_path} as YAML or JSON: {e}")
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Config file {file_path} must contain a mapping")
        logger.debug(f"Loaded YAML config from {file_path}")
        return data or {}

    raise ConfigError(f"Unsupported config file format: {file_path}")


def load_config_from_env() -> Dict[str, Any]:
    """Load logging overrides from environment variables.

    Returns:
        Configuration dictionary with values from environment
    """
    config: Dict[str, Any] = {}

    logging_data = {}
    if level := os.getenv("CPGSCOPE_LOG_LEVEL"):
        logging_data["level"] = level.upper()
    if log_format := os.getenv("CPGSCOPE_LOG_FORMAT"):
        logging_data["format"] = log_format.lower()
    if log_file := os.getenv("CPGSCOPE_LOG_FILE"):
        logging_data["file"] = log_file
    if logging_data:
        config["logging"] = logging_data

    return config


def _deep_merge_dicts(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with overriding values

    Returns:
        Merged dictionary (base is not modified)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    search_path: Optional[Path] = None,
    use_env: bool = True,
) -> CPGScopeConfig:
    """Load cpgscope configuration with fallback chain.

    Args:
        config_file: Explicit path to config file (optional)
        search_path: Starting directory for hierarchical search (default: current dir)
        use_env: Whether to apply CPGSCOPE_LOG_* environment overrides

    Returns:
        CPGScopeConfig instance with merged configuration

    Raises:
        ConfigError: If the config file cannot be loaded or is invalid
    """
    merged_data: Dict[str, Any] = {}

    config_path = Path(config_file) if config_file else find_config_file(search_path)
    if config_path:
        merged_data = _deep_merge_dicts(merged_data, load_config_file(config_path))
        logger.info(f"Loaded configuration from {config_path}")

    if use_env:
        env_data = load_config_from_env()
        if env_data:
            logger.debug("Loaded logging configuration from environment variables")
            merged_data = _deep_merge_dicts(merged_data, env_data)

    return CPGScopeConfig.from_dict(merged_data)


def _check_edge_kinds(kinds: Optional[List[str]], name: str) -> None:
    if kinds is None:
        return
    valid = {kind.value for kind in EdgeKind}
    for kind in kinds:
        if kind not in valid:
            raise ConfigError(
                f"{name} contains unknown edge kind {kind!r}; use one of: {', '.join(sorted(valid))}"
            )


def validate_config(config: CPGScopeConfig) -> List[str]:
    """Validate configuration and return warnings.

    Args:
        config: The configuration to validate

    Returns:
        List of warning messages (empty if no warnings)

    Raises:
        ConfigError: If configuration has invalid values that cannot be used
    """
    warnings: List[str] = []

    # ========================================================================
    # Centrality validation
    # ========================================================================
    centrality = config.centrality
    if not 0.0 <= centrality.damping <= 1.0:
        raise ConfigError("centrality.damping must be between 0.0 and 1.0")
    if centrality.max_iterations < 1:
        raise ConfigError("centrality.max_iterations must be >= 1")
    if centrality.tolerance <= 0:
        raise ConfigError("centrality.tolerance must be positive")
    if centrality.max_workers is not None and centrality.max_workers < 1:
        raise ConfigError("centrality.max_workers must be >= 1")
    if centrality.top_n < 0:
        raise ConfigError("centrality.top_n must be >= 0")

    # ========================================================================
    # Path validation
    # ========================================================================
    paths = config.paths
    if paths.max_depth is not None and paths.max_depth < 0:
        raise ConfigError("paths.max_depth must be >= 0")
    if paths.critical_path_max_depth < 0:
        raise ConfigError("paths.critical_path_max_depth must be >= 0")
    if paths.max_candidate_paths < 1:
        raise ConfigError("paths.max_candidate_paths must be >= 1")
    if paths.critical_path_max_depth > 20:
        warnings.append(
            f"paths.critical_path_max_depth={paths.critical_path_max_depth} may make "
            f"critical path enumeration very slow on dense graphs"
        )
    if paths.goal is not None and paths.goal not in GOAL_PRESETS:
        warnings.append(
            f"paths.goal {paths.goal!r} has no preset; neutral weights will be used"
        )
    for name, costs in (
        ("paths.node_type_penalties", paths.node_type_penalties),
        ("paths.edge_type_costs", paths.edge_type_costs),
    ):
        for key, value in costs.items():
            if not isinstance(value, (int, float)) or math.isnan(value) or value < 0:
                raise ConfigError(f"{name}.{key} must be a non-negative number")

    # ========================================================================
    # Impact validation
    # ========================================================================
    if config.impact.depth < 0:
        raise ConfigError("impact.depth must be >= 0")
    if config.impact.depth > 10:
        warnings.append(f"impact.depth={config.impact.depth} reaches most of a typical graph")
    _check_edge_kinds(config.impact.dependency_types, "impact.dependency_types")

    # ========================================================================
    # Community validation
    # ========================================================================
    algorithms = [a.value for a in CommunityAlgorithm]
    if config.communities.algorithm not in algorithms:
        raise ConfigError(
            f"communities.algorithm must be one of: {', '.join(algorithms)}"
        )
    if config.communities.max_iterations < 1:
        raise ConfigError("communities.max_iterations must be >= 1")

    # ========================================================================
    # Detector validation
    # ========================================================================
    if config.detectors.enabled is not None:
        smells = [s.value for s in SmellType]
        for smell in config.detectors.enabled:
            if smell not in smells:
                raise ConfigError(
                    f"detectors.enabled contains unknown smell {smell!r}; "
                    f"use one of: {', '.join(smells)}"
                )
        if not config.detectors.enabled:
            warnings.append("detectors.enabled is empty; no smells will be detected")

    t = config.detectors.thresholds
    for name in ("degree_high", "degree_medium", "betweenness_high", "betweenness_medium"):
        value = getattr(t, name)
        if not 0.0 <= value <= 1.0:
            raise ConfigError(f"detectors.thresholds.{name} must be between 0.0 and 1.0")
    if t.degree_medium > t.degree_high:
        warnings.append("detectors.thresholds.degree_medium is above degree_high")
    if t.betweenness_medium > t.betweenness_high:
        warnings.append("detectors.thresholds.betweenness_medium is above betweenness_high")
    if t.community_spread < 0 or t.fanout < 0 or t.impact_depth < 0:
        raise ConfigError("detectors.thresholds community_spread, fanout and impact_depth must be >= 0")
    _check_edge_kinds(t.cycle_edge_kinds, "detectors.thresholds.cycle_edge_kinds")

    # ========================================================================
    # Logging validation
    # ========================================================================
    if config.logging.level.upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of: {', '.join(LOG_LEVELS)}")
    if config.logging.format not in LOG_FORMATS:
        raise ConfigError(f"logging.format must be one of: {', '.join(LOG_FORMATS)}")

    return warnings


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value)


def generate_config_template(format: str = "yaml") -> str:
    """Generate configuration file template.

    Args:
        format: Template format ("yaml", "json", or "toml")

    Returns:
        Configuration template as string

    Raises:
        ValueError: If format is not supported
    """
    data = CPGScopeConfig().to_dict()

    if format == "yaml":
        template = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        return f"""# cpgscope Configuration File (.cpgscoperc)
#
# This file configures cpgscope's analysis defaults. It can be placed:
# - In your project root: .cpgscoperc
# - In your home directory: ~/.cpgscoperc
# - In your config directory: ~/.config/cpgscope.toml
#
# Environment variables can be referenced using ${{VAR_NAME}} syntax.

{template}"""

    elif format == "json":
        commented_data = {
            "_comment": "cpgscope Configuration File (.cpgscoperc)",
            "_note": "Environment variables can be referenced using ${VAR_NAME} syntax",
        }
        commented_data.update(data)
        return json.dumps(commented_data, indent=2)

    elif format == "toml":
        # TOML has no null: unset options are left out
        lines = [
            "# cpgscope Configuration File (cpgscope.toml)",
            "#",
            "# Environment variables can be referenced using ${VAR_NAME} syntax.",
        ]

        def emit(table: str, values: Dict[str, Any]) -> None:
            lines.extend(["", f"[{table}]"])
            nested = []
            for key, value in values.items():
                if value is None:
                    continue
                if isinstance(value, dict):
                    nested.append((f"{table}.{key}", value))
                else:
                    lines.append(f"{key} = {_toml_value(value)}")
            for nested_table, nested_values in nested:
                emit(nested_table, nested_values)

        for section, values in data.items():
            emit(section, values)
        return "\n".join(lines)

    else:
        raise ValueError(f"Unsupported format: {format}. Use 'yaml', 'json', or 'toml'")
