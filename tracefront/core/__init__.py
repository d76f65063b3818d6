"""Core error model for tracefront."""

from .errors import (
    ErrorCode,
    ERROR_METADATA,
    TraceIssue,
    TraceDecodeError,
    UnknownOpcode,
    UnknownRegister,
    MalformedDescriptor,
    InvalidTraceLine,
    MissingAnnotation,
    ConfigError,
)

__all__ = [
    'ErrorCode',
    'ERROR_METADATA',
    'TraceIssue',
    # Fatal
    'TraceDecodeError',
    'UnknownOpcode',
    'UnknownRegister',
    'MalformedDescriptor',
    'InvalidTraceLine',
    'MissingAnnotation',
    # Config
    'ConfigError',
]
