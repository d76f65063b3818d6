"""Configuration management for tracefront."""

from .schema import (
    DEFAULT_TICKS_PER_CYCLE,
    TraceFrontConfig,
    TracingConfig,
    TimingConfig,
    load_config,
    generate_default_config,
)

__all__ = [
    'DEFAULT_TICKS_PER_CYCLE',
    'TraceFrontConfig',
    'TracingConfig',
    'TimingConfig',
    'load_config',
    'generate_default_config',
]
