# ============================================================================
# FRK AUTOMATION CLI
# ============================================================================
# STATUS: Entry point - Operator command line
# PURPOSE: Deploy, inspect and manually run the FRK SQL Agent jobs
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
FRK Automation - operator command line.

    frk-automation deploy [--config frk.json]
    frk-automation plan [--config frk.json] [--offline]
    frk-automation render daily [--config frk.json] [--offline]
    frk-automation run peak
    frk-automation cleanup
    frk-automation export
    frk-automation audit
    frk-automation validate-env [--deployment-vars]

Without --config the record is read from FRK_DATABASE_NAME,
FRK_RETENTION_DAYS, FRK_JOB_OWNER, FRK_JOB_CATEGORY and FRK_EXPORT_PATH.
The target instance comes from FRK_SQL_* (see config.connection_config).

Every failure prints its cause and exits with the code mapped from its
ErrorCode: 2 configuration, 3 deployment rolled back, 4 job run failed or
cleanup refused by the retention guard, 5 database error.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional, Tuple

from config import AppConfig, FrkConfig, load_config, read_database_name, read_retention_days
from config.env_validation import log_validation_results
from core.catalog import JOB_KINDS
from core.errors import ErrorCode, get_exit_code
from core.models import JobDefinition, JobKind
from exceptions import ContractViolationError, FrkError
from services import DeploymentService, JobRunner
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "deploy_jobs")

KIND_CHOICES = [kind.value for kind in JOB_KINDS]


def _create_repositories(app: AppConfig, database_name: str) -> Dict[str, Any]:
    """SQL Server repositories for one target (tests replace this)."""
    from infrastructure import RepositoryFactory
    return RepositoryFactory.create_repositories(database_name, app.sql)


def _principal_not_checked(principal: str) -> bool:
    logger.warning(f"⚠️ --offline: job owner '{principal}' not looked up on the server")
    return True


def _database_name(app: AppConfig) -> str:
    return str(app.frk_raw.get("database_name") or "").strip()


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _load(app: AppConfig) -> Tuple[FrkConfig, Dict[str, Any]]:
    """
    Validate the record with the job owner looked up on the target.
    Returns the config and the repositories.
    """
    repos = _create_repositories(app, _database_name(app))
    return load_config(app.frk_raw, repos["agent_repo"].principal_exists), repos


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_deploy(app: AppConfig, args) -> int:
    repos = _create_repositories(app, _database_name(app))
    service = DeploymentService(repos["agent_repo"], repos["audit_repo"])
    result = service.deploy_from_raw(app.frk_raw)
    _print_json(result.to_dict())
    print("SUCCESS: All FRK jobs, configuration, and monitoring deployed.")
    print("NEXT STEPS:")
    for line in result.next_steps():
        print(f"  - {line}")
    return 0


def _plan(app: AppConfig, args) -> List[JobDefinition]:
    if getattr(args, "offline", False):
        return DeploymentService(agent_repo=None).plan_from_raw(app.frk_raw, _principal_not_checked)
    repos = _create_repositories(app, _database_name(app))
    return DeploymentService(repos["agent_repo"]).plan_from_raw(app.frk_raw)


def cmd_plan(app: AppConfig, args) -> int:
    _print_json([job.summary() for job in _plan(app, args)])
    return 0


def cmd_render(app: AppConfig, args) -> int:
    job = next(j for j in _plan(app, args) if j.kind is JobKind(args.kind))
    print(job.command, end="")
    return 0


def _run_kind(app: AppConfig, args, kind: JobKind) -> int:
    config, repos = _load(app)
    runner = JobRunner(repos["audit_repo"], repos["output_repo"])
    result = runner.run(kind, config)
    _print_json(result.to_dict())
    return 0


def _run_cleanup(app: AppConfig, args) -> int:
    """
    Cleanup takes RetentionDays as it stands at run time; a value below the
    floor reaches the guard, which refuses the run and records it in the
    audit log.
    """
    database_name = read_database_name(app.frk_raw)
    retention_days = read_retention_days(app.frk_raw)
    repos = _create_repositories(app, database_name)
    runner = JobRunner(repos["audit_repo"], repos["output_repo"])
    _print_json(runner.run_cleanup(retention_days, database_name).to_dict())
    return 0


def cmd_run(app: AppConfig, args) -> int:
    kind = JobKind(args.kind)
    if kind is JobKind.CLEANUP:
        return _run_cleanup(app, args)
    return _run_kind(app, args, kind)


def cmd_cleanup(app: AppConfig, args) -> int:
    return _run_cleanup(app, args)


def cmd_export(app: AppConfig, args) -> int:
    return _run_kind(app, args, JobKind.EXPORT)


def cmd_audit(app: AppConfig, args) -> int:
    repos = _create_repositories(app, _database_name(app))
    report = DeploymentService(repos["agent_repo"], repos["audit_repo"]).audit_report()
    _print_json(report)
    return 0


def cmd_validate_env(app: AppConfig, args) -> int:
    ok = log_validation_results(logger, include_deployment_vars=args.deployment_vars)
    return 0 if ok else get_exit_code(ErrorCode.CONFIG_ERROR)


COMMANDS = {
    "deploy": cmd_deploy,
    "plan": cmd_plan,
    "render": cmd_render,
    "run": cmd_run,
    "cleanup": cmd_cleanup,
    "export": cmd_export,
    "audit": cmd_audit,
    "validate-env": cmd_validate_env,
}


# ============================================================================
# ENTRY POINT
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frk-automation",
        description="Deploy and run the First Responder Kit SQL Agent jobs",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def with_config(p, offline: bool = False):
        p.add_argument(
            "--config", type=str, default=None,
            help="JSON file with the five FRK keys (default: FRK_* environment variables)",
        )
        if offline:
            p.add_argument(
                "--offline", action="store_true",
                help="Do not connect; skip the job owner lookup",
            )
        return p

    with_config(sub.add_parser("deploy", help="Idempotently (re)install all FRK jobs"))
    with_config(sub.add_parser("plan", help="Print the jobs a deployment would install"), offline=True)
    render = with_config(sub.add_parser("render", help="Print one generated job step"), offline=True)
    render.add_argument("kind", choices=KIND_CHOICES)
    run = with_config(sub.add_parser("run", help="Run one job body now, audit-logged"))
    run.add_argument("kind", choices=KIND_CHOICES)
    with_config(sub.add_parser("cleanup", help="Drop output tables past retention"))
    with_config(sub.add_parser("export", help="Export recent output tables to CSV"))
    with_config(sub.add_parser("audit", help="List audit log entries without an EndTime"))
    validate = sub.add_parser("validate-env", help="Check FRK_* environment variables")
    validate.add_argument(
        "--deployment-vars", action="store_true",
        help="Also require the five FRK record variables",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        app = AppConfig.from_environment(getattr(args, "config", None))
        return COMMANDS[args.command](app, args)
    except (FrkError, ContractViolationError) as e:
        logger.error(f"❌ {args.command} failed: {e}",
                     extra={'custom_dimensions': {'error_code': e.error_code.value}})
        print(f"ERROR [{e.error_code.value}]: {e}", file=sys.stderr)
        cause = getattr(e, "cause", None) or e.__cause__
        if cause is not None:
            print(f"  Cause: {cause}", file=sys.stderr)
        return get_exit_code(e.error_code)


if __name__ == "__main__":
    sys.exit(main())
