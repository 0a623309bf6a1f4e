# ============================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ============================================================================
# STATUS: Configuration - Startup validation with regex patterns
# PURPOSE: Validate FRK_* env vars before any connection is opened
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Environment Variable Validation Module.

Validates environment variables with regex patterns to catch configuration
errors EARLY with clear, actionable error messages. The deployment CLI runs
this before opening a connection to the target instance.

Design Philosophy:
    - FAIL FAST: Catch config errors before touching the server
    - CLEAR ERRORS: Show exactly what's wrong and how to fix it
    - REGEX VALIDATION: Format validation, not just presence checks
    - ZERO DEPENDENCIES: Only standard library imports

Usage:
    from config.env_validation import validate_environment

    errors = validate_environment()
    for error in errors:
        print(f"{error.var_name}: {error.message}")
        print(f"  Fix: {error.fix_suggestion}")

Exports:
    ENV_VAR_RULES: Dict of all validation rules
    DEPLOYMENT_VARS: Rules that only apply when the record comes from the environment
    ValidationError: Dataclass for validation errors
    validate_environment: Main validation function
    validate_single_var: Validate one variable
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any


# ============================================================================
# VALIDATION ERROR
# ============================================================================

@dataclass
class ValidationError:
    """Result of a failed environment variable validation."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self._mask_sensitive(self.current_value),
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }

    def _mask_sensitive(self, value: Optional[str]) -> Optional[str]:
        """Mask potentially sensitive values."""
        if value is None:
            return None
        if "password" in self.var_name.lower():
            return "***MASKED***"
        if len(value) > 30:
            return f"{value[:20]}...({len(value)} chars)"
        return value


# ============================================================================
# VALIDATION RULE DEFINITION
# ============================================================================

@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex pattern for validation
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        default_value: Default value used if not set (for warning messages)
        warn_on_default: Emit warning when using default value
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    default_value: Optional[str] = None
    warn_on_default: bool = True


# ============================================================================
# VALIDATION RULES
# ============================================================================

# SQL Server sysname: up to 128 chars, no control characters
_SYSNAME = re.compile(r"^[^\x00-\x1f]{1,128}$")
_DATABASE_NAME = re.compile(r"^[A-Za-z_@#][A-Za-z0-9_@#$ -]{0,127}$")
_SERVER_NAME = re.compile(r"^[A-Za-z0-9_.()-]+(\\[A-Za-z0-9_$-]+)?(,[0-9]{1,5})?$")
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_BOOLEAN = re.compile(r"^(true|false|1|0|yes|no)$", re.IGNORECASE)
_PATH = re.compile(r"^[^\x00-\x1f\"<>|?*]{1,255}$")


DEPLOYMENT_VARS: Dict[str, EnvVarRule] = {
    "FRK_DATABASE_NAME": EnvVarRule(
        pattern=_DATABASE_NAME,
        pattern_description="SQL Server database name (letters, digits, _ @ # $ - and spaces, max 128)",
        required=True,
        fix_suggestion="Set the database that will hold the Blitz output tables",
        example="DBAtools",
    ),
    "FRK_RETENTION_DAYS": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer, at least 7",
        required=True,
        fix_suggestion="Set the number of days to keep output tables",
        example="30",
    ),
    "FRK_JOB_OWNER": EnvVarRule(
        pattern=_SYSNAME,
        pattern_description="Existing SQL Server login (max 128 chars)",
        required=True,
        fix_suggestion="Use a dedicated, least-privileged service account login",
        example="svc_frk_agent",
    ),
    "FRK_JOB_CATEGORY": EnvVarRule(
        pattern=_SYSNAME,
        pattern_description="SQL Agent job category name (max 128 chars)",
        required=True,
        fix_suggestion="Set the job category used to group the FRK jobs",
        example="Database Maintenance (FRK)",
    ),
    "FRK_EXPORT_PATH": EnvVarRule(
        pattern=_PATH,
        pattern_description="Directory path (max 255 chars, no wildcard or quote characters)",
        required=True,
        fix_suggestion="Set a directory the SQL Agent service account can write to",
        example="D:\\SQL_Exports",
    ),
}


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    "FRK_SQL_SERVER": EnvVarRule(
        pattern=_SERVER_NAME,
        pattern_description="host, host\\instance or host,port",
        required=False,
        fix_suggestion="Set the target instance like 'sqlprod01' or 'sqlprod01\\INST2'",
        example="sqlprod01",
        default_value="localhost",
    ),
    "FRK_SQL_TIMEOUT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer (seconds)",
        required=False,
        fix_suggestion="Use a login timeout like 30",
        example="30",
        default_value="30",
        warn_on_default=False,
    ),
    "FRK_SQL_TRUST_CERT": EnvVarRule(
        pattern=_BOOLEAN,
        pattern_description="Boolean value (true/false)",
        required=False,
        fix_suggestion="Set to 'true' only for instances with self-signed certificates",
        example="false",
        default_value="false",
        warn_on_default=False,
    ),
    "LOG_LEVEL": EnvVarRule(
        pattern=re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE),
        pattern_description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        required=False,
        fix_suggestion="Set to DEBUG for verbose logging, INFO for normal operation",
        example="INFO",
        default_value="INFO",
        warn_on_default=False,
    ),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[ValidationError]:
    """
    Validate a single environment variable against its rule.

    Args:
        var_name: Environment variable name
        rule: Validation rule to apply
        include_warnings: Whether to return warnings for vars using defaults

    Returns:
        ValidationError if validation fails or warning if using default, None if passes
    """
    value = os.environ.get(var_name)

    if rule.required and (value is None or value.strip() == ""):
        return ValidationError(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    if value is None or value == "":
        if include_warnings and rule.warn_on_default and rule.default_value is not None:
            return ValidationError(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if not rule.pattern.match(value):
        return ValidationError(
            var_name=var_name,
            message="Invalid format",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    return None


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_deployment_vars: bool = False,
    include_warnings: bool = True
) -> List[ValidationError]:
    """
    Validate all environment variables against their rules.

    Args:
        rules: Optional custom rules dict (defaults to ENV_VAR_RULES)
        include_deployment_vars: Also check the five FRK_* record variables
            (only when the record is read from the environment)
        include_warnings: Whether to include warnings for vars using defaults

    Returns:
        List of ValidationError objects (errors and optionally warnings)
    """
    if rules is None:
        rules = dict(ENV_VAR_RULES)
        if include_deployment_vars:
            rules.update(DEPLOYMENT_VARS)

    results = []
    for var_name, rule in rules.items():
        result = validate_single_var(var_name, rule, include_warnings=include_warnings)
        if result:
            results.append(result)

    return results


def log_validation_results(logger=None, include_deployment_vars: bool = False) -> bool:
    """
    Log validation results at appropriate levels.

    Returns True if no errors (warnings are OK).
    """
    all_results = validate_environment(
        include_deployment_vars=include_deployment_vars,
        include_warnings=True
    )

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    def _log(level: str, msg: str):
        if logger:
            getattr(logger, level.lower())(msg)
        else:
            print(f"[{level.upper()}] {msg}")

    for error in errors:
        _log("error", f"ENV VAR ERROR: {error.var_name} - {error.message}")
        _log("error", f"  Expected: {error.expected_pattern}")
        _log("error", f"  Fix: {error.fix_suggestion}")

    for warning in warnings:
        _log("warning", f"ENV VAR: {warning.var_name} not set ({warning.expected_pattern})")

    if errors:
        _log("error", f"❌ Environment validation failed: {len(errors)} error(s)")
        return False
    _log("info", "✅ Environment validation passed")
    return True


__all__ = [
    "ENV_VAR_RULES",
    "DEPLOYMENT_VARS",
    "EnvVarRule",
    "ValidationError",
    "validate_environment",
    "validate_single_var",
    "log_validation_results",
]
