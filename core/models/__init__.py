"""
Core Data Models Package.

Contains pure data structures without business logic.

Exports:
    JobKind, JobSubsystem, FrequencyType, Weekday, StepAction, StepOutcome: Enums
    JobSchedule, JobDefinition: SQL Agent job models
    DiagnosticCall, OutputTable: Diagnostic procedure models
    JobLogEntry: Audit log row
"""

# Enums
from .enums import (
    JobKind,
    JobSubsystem,
    FrequencyType,
    Weekday,
    StepAction,
    StepOutcome,
)

# Job models
from .job import JobSchedule, JobDefinition

# Diagnostic models
from .diagnostics import DiagnosticCall, OutputTable

# Audit models
from .audit import JobLogEntry

__all__ = [
    'JobKind',
    'JobSubsystem',
    'FrequencyType',
    'Weekday',
    'StepAction',
    'StepOutcome',
    'JobSchedule',
    'JobDefinition',
    'DiagnosticCall',
    'OutputTable',
    'JobLogEntry',
]
