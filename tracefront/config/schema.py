"""
Configuration schema for tracefront.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Type coercion for substituted values
- Validation with error messages

Example config (tracefront.yml):
    version: 1

    tracing:
      fetch: true
      branch: true
      memory: ${TRACE_MEMORY}

    timing:
      ticks_per_cycle: 500
"""

import os
import re
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Any

import yaml

from ..core.errors import ConfigError


# Ticks per core cycle (simulator tick = 1 ps at a 2 GHz core clock)
DEFAULT_TICKS_PER_CYCLE = 500

_TRUE_STRINGS = ('true', 'yes', 'on', '1')
_FALSE_STRINGS = ('false', 'no', 'off', '0')


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Example:
        ${TRACE_MEMORY} → os.environ.get('TRACE_MEMORY')
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                return match.group(0)  # Keep original if not found
            return env_value

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigError(f"{name}: expected a boolean, got {value!r}")


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name}: expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            pass
    raise ConfigError(f"{name}: expected an integer, got {value!r}")


def _section(name: str, value: Any) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{name}: expected a mapping, got {value!r}")
    return value


@dataclass
class TracingConfig:
    """Which annotation lines the tracer emitted after each instruction."""
    fetch: bool = False     # @F fetch latency
    branch: bool = False    # @B branch outcome
    memory: bool = False    # @M memory latency (load/store/atomic only)

    @classmethod
    def from_dict(cls, data: dict) -> 'TracingConfig':
        unknown = set(data) - {'fetch', 'branch', 'memory'}
        if unknown:
            raise ConfigError(f"Unknown tracing options: {sorted(unknown)}")
        return cls(**{k: _coerce_bool(f"tracing.{k}", v) for k, v in data.items()})


@dataclass
class TimingConfig:
    """Tick to cycle conversion."""
    ticks_per_cycle: int = DEFAULT_TICKS_PER_CYCLE

    @classmethod
    def from_dict(cls, data: dict) -> 'TimingConfig':
        unknown = set(data) - {'ticks_per_cycle'}
        if unknown:
            raise ConfigError(f"Unknown timing options: {sorted(unknown)}")
        if 'ticks_per_cycle' in data:
            return cls(ticks_per_cycle=_coerce_int('timing.ticks_per_cycle', data['ticks_per_cycle']))
        return cls()


@dataclass
class TraceFrontConfig:
    """Root configuration."""

    version: int = 1
    tracing: TracingConfig = field(default_factory=TracingConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)

    @classmethod
    def load(cls, path: Path) -> 'TraceFrontConfig':
        """Load from YAML file with env var substitution."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Top level of {path} must be a mapping")

        data = _substitute_env_vars(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'TraceFrontConfig':
        """Create from dictionary."""
        return cls(
            version=_coerce_int('version', data.get('version', 1)),
            tracing=TracingConfig.from_dict(_section('tracing', data.get('tracing'))),
            timing=TimingConfig.from_dict(_section('timing', data.get('timing'))),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = []

        if self.version != 1:
            errors.append(f"Unsupported config version: {self.version}")

        if self.timing.ticks_per_cycle <= 0:
            errors.append(f"Invalid ticks_per_cycle: {self.timing.ticks_per_cycle}")

        return errors


def load_config(path: Optional[Path] = None) -> TraceFrontConfig:
    """Load config from file or return defaults."""
    if path and Path(path).exists():
        return TraceFrontConfig.load(path)

    search_paths = [
        Path('./tracefront.yml'),
        Path('./tracefront.yaml'),
        Path.home() / '.tracefront' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return TraceFrontConfig.load(p)

    return TraceFrontConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return f"""# tracefront configuration
version: 1

# Annotation lines emitted by the tracer after each @I line
tracing:
  fetch: false
  branch: false
  memory: false

timing:
  ticks_per_cycle: {DEFAULT_TICKS_PER_CYCLE}
"""
