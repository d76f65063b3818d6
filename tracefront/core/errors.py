"""
Error codes for tracefront.

Structured error codes for machine-parseable diagnostics.

Format: E{category}{number}
- E1xxx: Registry / decoding errors
- E2xxx: Trace stream errors
- E3xxx: Configuration errors

Fatal conditions are raised as TraceDecodeError subclasses and abort the run.
Recoverable conditions are logged and recorded as TraceIssue objects.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Registry / decoding errors
    E1001_UNKNOWN_OPCODE = "E1001"
    E1002_UNKNOWN_REGISTER = "E1002"
    E1003_MALFORMED_DESCRIPTOR = "E1003"

    # E2xxx: Trace stream errors
    E2001_INVALID_TRACE_LINE = "E2001"
    E2002_MISSING_ANNOTATION = "E2002"
    E2003_UNEXPECTED_MISPREDICTION = "E2003"
    E2004_MISSING_MEMORY_ANNOTATION = "E2004"
    E2005_STRAY_ANNOTATION = "E2005"

    # E3xxx: Configuration errors
    E3001_INVALID_CONFIG = "E3001"
    E3002_VALIDATION_FAILED = "E3002"


# Error code metadata
ERROR_METADATA = {
    ErrorCode.E1001_UNKNOWN_OPCODE: {
        'severity': 'error',
        'message': 'Opcode not present in the registry',
        'recoverable': False,
    },
    ErrorCode.E1002_UNKNOWN_REGISTER: {
        'severity': 'error',
        'message': 'Register name not recognized',
        'recoverable': False,
    },
    ErrorCode.E1003_MALFORMED_DESCRIPTOR: {
        'severity': 'error',
        'message': 'Malformed descriptor or field',
        'recoverable': False,
    },
    ErrorCode.E2001_INVALID_TRACE_LINE: {
        'severity': 'error',
        'message': 'Invalid trace line',
        'recoverable': False,
    },
    ErrorCode.E2002_MISSING_ANNOTATION: {
        'severity': 'error',
        'message': 'Expected annotation line is missing',
        'recoverable': False,
    },
    ErrorCode.E2003_UNEXPECTED_MISPREDICTION: {
        'severity': 'warning',
        'message': 'Misprediction reported for a non-branch instruction',
        'recoverable': True,
    },
    ErrorCode.E2004_MISSING_MEMORY_ANNOTATION: {
        'severity': 'warning',
        'message': 'Expected memory access cycles, defaulting to 1',
        'recoverable': True,
    },
    ErrorCode.E2005_STRAY_ANNOTATION: {
        'severity': 'warning',
        'message': 'Ignoring annotation line outside its instruction',
        'recoverable': True,
    },
    ErrorCode.E3001_INVALID_CONFIG: {
        'severity': 'error',
        'message': 'Invalid configuration',
        'recoverable': False,
    },
    ErrorCode.E3002_VALIDATION_FAILED: {
        'severity': 'error',
        'message': 'Configuration validation failed',
        'recoverable': False,
    },
}


@dataclass
class TraceIssue:
    """
    Structured recoverable condition with context.

    Example:
        issue = TraceIssue(
            code=ErrorCode.E2004_MISSING_MEMORY_ANNOTATION,
            context={'line': '@I 0x2000 ldr x1 0x10(x5)', 'got': '@I 0x2004 nop'},
        )
    """
    code: ErrorCode
    context: Optional[dict] = None

    @property
    def severity(self) -> str:
        return ERROR_METADATA.get(self.code, {}).get('severity', 'error')

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        if self.context:
            return f"{base_msg}: {self.context}"
        return base_msg

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA.get(self.code, {}).get('recoverable', False)

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'severity': self.severity,
            'message': self.message,
            'recoverable': self.recoverable,
            'context': self.context,
        }


class TraceDecodeError(ValueError):
    """
    Base class for fatal trace conditions.

    Each subclass pins its ErrorCode. The detail string is the human-readable
    part; context carries the machine-readable fields.
    """

    code: ErrorCode = ErrorCode.E2001_INVALID_TRACE_LINE

    def __init__(self, detail: str, context: Optional[dict] = None):
        super().__init__(f"[{self.code.value}] {detail}")
        self.detail = detail
        self.context = context or {}

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA[self.code]['recoverable']

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'severity': ERROR_METADATA[self.code]['severity'],
            'message': self.detail,
            'recoverable': self.recoverable,
            'context': self.context,
        }


class UnknownOpcode(TraceDecodeError):
    code = ErrorCode.E1001_UNKNOWN_OPCODE


class UnknownRegister(TraceDecodeError):
    code = ErrorCode.E1002_UNKNOWN_REGISTER


class MalformedDescriptor(TraceDecodeError):
    code = ErrorCode.E1003_MALFORMED_DESCRIPTOR


class InvalidTraceLine(TraceDecodeError):
    code = ErrorCode.E2001_INVALID_TRACE_LINE


class MissingAnnotation(TraceDecodeError):
    code = ErrorCode.E2002_MISSING_ANNOTATION


class ConfigError(ValueError):
    """Raised when a configuration file cannot be turned into a valid config."""

    code = ErrorCode.E3001_INVALID_CONFIG

    def __init__(self, detail: str, code: Optional[ErrorCode] = None):
        if code is not None:
            self.code = code
        super().__init__(f"[{self.code.value}] {detail}")
        self.detail = detail
