"""
Error Code Definitions and Classification.

Centralized error code management for the deployment tool and the
scheduled job runners.

Key Features:
    - Explicit error codes for all failure modes
    - Phase classification (pre-mutation, deployment, runtime)
    - Process exit code for each error code (CLI contract)

Exports:
    ErrorCode: Standardized error codes enum
    ErrorPhase: When in the lifecycle the error can occur
    get_error_phase: Phase lookup
    get_exit_code: Exit code lookup
"""

from enum import Enum
from typing import Dict


class ErrorCode(str, Enum):
    """
    Standardized error codes for all application errors.

    These codes are attached to every FrkError and are what the CLI turns
    into a process exit code, so SQL Agent CmdExec steps and wrapper scripts
    can distinguish failure causes.
    """

    # ========================================================================
    # CONFIGURATION ERRORS - fatal, zero side effects
    # ========================================================================
    MISSING_PARAMETER = "MISSING_PARAMETER"  # A configuration field is absent/empty
    INVALID_PARAMETER = "INVALID_PARAMETER"  # A field has the wrong type/shape
    INVALID_RETENTION = "INVALID_RETENTION"  # RetentionDays below the floor
    RESERVED_NAME = "RESERVED_NAME"  # Storage location is a system database
    UNKNOWN_PRINCIPAL = "UNKNOWN_PRINCIPAL"  # Job owner login does not exist
    CONFIG_ERROR = "CONFIG_ERROR"  # Environment/connection configuration error

    # ========================================================================
    # DEPLOYMENT ERRORS - rolled back
    # ========================================================================
    DEPLOYMENT_FAILED = "DEPLOYMENT_FAILED"  # Reconciler aborted and rolled back

    # ========================================================================
    # RUNTIME ERRORS - recorded in the audit log
    # ========================================================================
    RETENTION_GUARD = "RETENTION_GUARD"  # Cleanup refused to run
    DIAGNOSTIC_CALL_FAILED = "DIAGNOSTIC_CALL_FAILED"  # A Blitz procedure failed
    EXPORT_PARTIAL_FAILURE = "EXPORT_PARTIAL_FAILURE"  # One or more CSVs not written

    # ========================================================================
    # INFRASTRUCTURE ERRORS
    # ========================================================================
    DATABASE_ERROR = "DATABASE_ERROR"  # Driver-level failure
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"  # Programming error

    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ErrorPhase(str, Enum):
    """Lifecycle phase in which an error is raised."""

    PRE_MUTATION = "PRE_MUTATION"  # Nothing has been touched yet
    DEPLOYMENT = "DEPLOYMENT"  # Inside the reconciler's unit of work
    RUNTIME = "RUNTIME"  # Inside a scheduled (or manual) job run


_ERROR_PHASE: Dict[ErrorCode, ErrorPhase] = {
    ErrorCode.MISSING_PARAMETER: ErrorPhase.PRE_MUTATION,
    ErrorCode.INVALID_PARAMETER: ErrorPhase.PRE_MUTATION,
    ErrorCode.INVALID_RETENTION: ErrorPhase.PRE_MUTATION,
    ErrorCode.RESERVED_NAME: ErrorPhase.PRE_MUTATION,
    ErrorCode.UNKNOWN_PRINCIPAL: ErrorPhase.PRE_MUTATION,
    ErrorCode.CONFIG_ERROR: ErrorPhase.PRE_MUTATION,
    ErrorCode.DEPLOYMENT_FAILED: ErrorPhase.DEPLOYMENT,
    ErrorCode.RETENTION_GUARD: ErrorPhase.RUNTIME,
    ErrorCode.DIAGNOSTIC_CALL_FAILED: ErrorPhase.RUNTIME,
    ErrorCode.EXPORT_PARTIAL_FAILURE: ErrorPhase.RUNTIME,
}

# Exit codes: 2 = configuration, 3 = deployment, 4 = runtime, 5 = database
_EXIT_CODES: Dict[ErrorCode, int] = {
    ErrorCode.MISSING_PARAMETER: 2,
    ErrorCode.INVALID_PARAMETER: 2,
    ErrorCode.INVALID_RETENTION: 2,
    ErrorCode.RESERVED_NAME: 2,
    ErrorCode.UNKNOWN_PRINCIPAL: 2,
    ErrorCode.CONFIG_ERROR: 2,
    ErrorCode.DEPLOYMENT_FAILED: 3,
    ErrorCode.RETENTION_GUARD: 4,
    ErrorCode.DIAGNOSTIC_CALL_FAILED: 4,
    ErrorCode.EXPORT_PARTIAL_FAILURE: 4,
    ErrorCode.DATABASE_ERROR: 5,
}


def get_error_phase(error_code: ErrorCode) -> ErrorPhase:
    """
    Get the lifecycle phase for an error code.

    Example:
        >>> get_error_phase(ErrorCode.UNKNOWN_PRINCIPAL)
        <ErrorPhase.PRE_MUTATION: 'PRE_MUTATION'>
    """
    return _ERROR_PHASE.get(error_code, ErrorPhase.RUNTIME)


def get_exit_code(error_code: ErrorCode) -> int:
    """
    Get the process exit code for an error code.

    Unclassified codes map to 1.
    """
    return _EXIT_CODES.get(error_code, 1)
