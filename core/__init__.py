"""
Core Deployment Components.

Pure building blocks of the FRK job pipeline, independent of the driver
used to reach SQL Server.

Structure:
    models/: Pure data structures (jobs, schedules, audit log entries)
    schema/: T-SQL escaping, script templates and DDL
    catalog.py: The five FRK jobs, their calls and schedules
    reconciler.py: Idempotent deployment
    saga.py: Compensation log for non-transactional steps
    errors.py: Error codes and exit codes

Submodules are imported explicitly (from core.reconciler import Reconciler);
exceptions.py imports core.errors, so this package stays import-free.
"""
