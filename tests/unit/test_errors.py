"""
Error taxonomy tests: codes, phases and exit codes.
"""

import pytest

from core.errors import ErrorCode, ErrorPhase, get_error_phase, get_exit_code
from exceptions import (
    ConfigValidationError,
    ContractViolationError,
    DatabaseError,
    DeploymentTransactionError,
    ExportPartialFailure,
    FrkError,
    InvalidRetention,
    MissingConfigField,
    ReservedName,
    RetentionGuardError,
    TaskRuntimeError,
    UnknownPrincipal,
)


class TestExitCodes:

    @pytest.mark.parametrize("error, exit_code", [
        (MissingConfigField(["job_owner"]), 2),
        (InvalidRetention(6, 7), 2),
        (ReservedName("msdb"), 2),
        (UnknownPrincipal("ghost"), 2),
        (DeploymentTransactionError("commit", RuntimeError("x")), 3),
        (RetentionGuardError(5, 7), 4),
        (TaskRuntimeError("FRK - Daily Health Check", "step", "boom", 1), 4),
        (ExportPartialFailure(["BlitzWho"], {"BlitzFirst": "timeout"}), 4),
        (DatabaseError("login failed"), 5),
    ])
    def test_exit_code(self, error, exit_code):
        assert isinstance(error, FrkError)
        assert get_exit_code(error.error_code) == exit_code

    def test_unclassified_maps_to_one(self):
        assert get_exit_code(ErrorCode.UNEXPECTED_ERROR) == 1

    def test_contract_violation_is_not_frk_error(self):
        assert not issubclass(ContractViolationError, FrkError)
        assert issubclass(ContractViolationError, TypeError)


class TestPhases:

    def test_config_errors_are_pre_mutation(self):
        for code in (ErrorCode.MISSING_PARAMETER, ErrorCode.UNKNOWN_PRINCIPAL, ErrorCode.RESERVED_NAME):
            assert get_error_phase(code) is ErrorPhase.PRE_MUTATION

    def test_deployment_phase(self):
        assert get_error_phase(ErrorCode.DEPLOYMENT_FAILED) is ErrorPhase.DEPLOYMENT


class TestMessages:

    def test_deployment_error_carries_cause_and_compensation(self):
        cause = RuntimeError("msdb is full")
        error = DeploymentTransactionError("install_job:FRK - Daily Health Check", cause, ["drop failed"])
        assert error.cause is cause
        assert "No changes committed" in str(error)
        assert "drop failed" in str(error)

    def test_missing_fields_listed(self):
        assert "job_owner, export_path" in str(MissingConfigField(["job_owner", "export_path"]))

    def test_config_errors_share_base(self):
        assert isinstance(InvalidRetention(3, 7), ConfigValidationError)

    def test_export_failure_lists_tables(self):
        error = ExportPartialFailure(["BlitzWho"], {"BlitzFirst": "timeout"})
        assert "BlitzFirst: timeout" in str(error)
        assert "1 table(s)" in str(error)
