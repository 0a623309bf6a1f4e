# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by config, core, services and the CLI
# PURPOSE: Exception hierarchy separating configuration, deployment and
#          runtime failures of the FRK job pipeline
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Configuration failures (fatal, raised before anything is mutated)
3. Deployment failures (the reconciler rolled everything back)
4. Runtime failures (a scheduled run failed; recorded in the audit log)

Every FrkError carries an ErrorCode so the CLI can map it to an exit code.
"""

from typing import List, Optional, Sequence

from core.errors import ErrorCode


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.

    Examples:
        - Script generator asked to render an unknown job kind
        - Repository receives a string instead of a JobDefinition
    """
    error_code = ErrorCode.CONTRACT_VIOLATION


class FrkError(Exception):
    """Base class for every expected failure of the FRK pipeline."""

    error_code = ErrorCode.UNEXPECTED_ERROR


# ============================================================================
# CONFIGURATION
# ============================================================================

class ConfigValidationError(FrkError):
    """
    Configuration record failed validation.

    Fatal, raised before any state mutation, zero side effects.
    """
    error_code = ErrorCode.INVALID_PARAMETER


class MissingConfigField(ConfigValidationError):
    """One or more of the five mandatory configuration fields is absent."""
    error_code = ErrorCode.MISSING_PARAMETER

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)
        super().__init__(
            f"Missing required configuration field(s): {', '.join(self.fields)}"
        )


class InvalidRetention(ConfigValidationError):
    """RetentionDays is below the minimum retention floor."""
    error_code = ErrorCode.INVALID_RETENTION

    def __init__(self, retention_days, minimum: int):
        self.retention_days = retention_days
        self.minimum = minimum
        super().__init__(
            f"RetentionDays must be at least {minimum} days (got {retention_days})."
        )


class ReservedName(ConfigValidationError):
    """Storage location names one of the system databases."""
    error_code = ErrorCode.RESERVED_NAME

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Storage location '{name}' is a reserved system database name."
        )


class UnknownPrincipal(ConfigValidationError):
    """Configured job owner does not exist in the server principal registry."""
    error_code = ErrorCode.UNKNOWN_PRINCIPAL

    def __init__(self, principal: str):
        self.principal = principal
        super().__init__(
            f"Configured service account '{principal}' does not exist in SQL Server. "
            "Please create and grant appropriate rights."
        )


class ConfigurationError(FrkError):
    """
    System configuration error (environment, connection settings).

    Examples:
        - Malformed FRK_SQL_* environment variables
        - Unreadable configuration file
    """
    error_code = ErrorCode.CONFIG_ERROR


# ============================================================================
# DEPLOYMENT
# ============================================================================

class DeploymentTransactionError(FrkError):
    """
    The reconciler aborted. The msdb transaction was rolled back and any
    non-transactional step was compensated.

    Attributes:
        step: Name of the step that failed
        cause: The underlying exception
        compensation_errors: Messages from compensations that themselves failed
        result: The DeploymentResult of the aborted run, when available
    """
    error_code = ErrorCode.DEPLOYMENT_FAILED

    def __init__(self, step: str, cause: BaseException,
                 compensation_errors: Optional[List[str]] = None, result=None):
        self.step = step
        self.cause = cause
        self.compensation_errors = list(compensation_errors or [])
        self.result = result
        message = f"Deployment failed at step '{step}': {cause}. No changes committed."
        if self.compensation_errors:
            message += f" Compensation failures: {'; '.join(self.compensation_errors)}"
        super().__init__(message)


# ============================================================================
# RUNTIME
# ============================================================================

class RetentionGuardError(FrkError):
    """Cleanup refused to run because retention is below the floor."""
    error_code = ErrorCode.RETENTION_GUARD

    def __init__(self, retention_days: int, minimum: int):
        self.retention_days = retention_days
        self.minimum = minimum
        super().__init__(
            f"Retention period is less than {minimum} days ({retention_days}). "
            "Aborting cleanup for safety."
        )


class TaskRuntimeError(FrkError):
    """
    A scheduled job body failed. The failure is already recorded in the
    audit log when this is raised.
    """
    error_code = ErrorCode.DIAGNOSTIC_CALL_FAILED

    def __init__(self, job_name: str, step_name: str, detail: str,
                 job_log_id: Optional[int] = None):
        self.job_name = job_name
        self.step_name = step_name
        self.detail = detail
        self.job_log_id = job_log_id
        super().__init__(f"{job_name} / {step_name} failed: {detail}")


class ExportPartialFailure(FrkError):
    """
    One or more tables could not be exported. Files written for the other
    tables in the same run are kept.
    """
    error_code = ErrorCode.EXPORT_PARTIAL_FAILURE

    def __init__(self, exported: Sequence[str], failures: dict):
        self.exported = list(exported)
        self.failures = dict(failures)
        detail = "; ".join(f"{table}: {error}" for table, error in self.failures.items())
        super().__init__(
            f"The FRK local export job failed for {len(self.failures)} table(s) "
            f"({len(self.exported)} exported). {detail}"
        )


# ============================================================================
# INFRASTRUCTURE
# ============================================================================

class DatabaseError(FrkError):
    """
    Database operation failures.

    Examples:
        - Connection refused / login failed
        - Deadlock detected
        - Procedure raised an error
    """
    error_code = ErrorCode.DATABASE_ERROR
