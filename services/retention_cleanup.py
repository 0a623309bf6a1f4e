"""
Retention Cleanup Service - Drop expired diagnostic output tables.

Python rendition of the weekly cleanup job body:

    1. Guard: refuse to run when retention is below the floor (7 days).
       The job body re-checks at run time because the configuration can be
       altered after deployment.
    2. Cutoff = midnight of (now - retention_days), the same value T-SQL
       gives for CAST(DATEADD(DAY, -N, GETDATE()) AS DATE).
    3. Select 'Blitz%' tables in dbo created strictly before the cutoff.
       A table created exactly at the cutoff is kept.
    4. Drop them in one batch. No qualifying table is a successful no-op.

Exports:
    RetentionCleanupService: Cleanup coordinator
    CleanupResult: Outcome of one cleanup run
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

from config.defaults import FrkDefaults
from core.models import OutputTable
from core.schema import build_drop_batch
from exceptions import RetentionGuardError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "RetentionCleanupService")


@dataclass
class CleanupResult:
    """Result of a cleanup run."""
    retention_days: int
    cutoff: datetime
    scanned: List[str] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)
    batch: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "retention_days": self.retention_days,
            "cutoff": self.cutoff.isoformat(),
            "tables_scanned": len(self.scanned),
            "tables_dropped": self.dropped,
        }


class RetentionCleanupService:
    """
    Cleanup of the storage database.

    Usage:
        service = RetentionCleanupService(OutputTableRepository("DBAtools"))
        result = service.run(retention_days=30)
    """

    def __init__(
        self,
        output_repo,
        clock: Callable[[], datetime] = datetime.now,
        min_retention_days: int = FrkDefaults.MIN_RETENTION_DAYS,
        table_prefix: str = FrkDefaults.OUTPUT_TABLE_PREFIX,
        schema: str = FrkDefaults.OUTPUT_SCHEMA,
    ):
        self.output_repo = output_repo
        self.clock = clock
        self.min_retention_days = min_retention_days
        self.table_prefix = table_prefix
        self.schema = schema

    def check_retention(self, retention_days: int) -> None:
        """
        Raises:
            RetentionGuardError: retention_days below the floor
        """
        if retention_days < self.min_retention_days:
            logger.error(
                f"❌ Retention period {retention_days} is below {self.min_retention_days} days; "
                "aborting cleanup"
            )
            raise RetentionGuardError(retention_days, self.min_retention_days)

    @staticmethod
    def cutoff_for(now: datetime, retention_days: int) -> datetime:
        """Midnight of the day retention_days before now."""
        day = (now - timedelta(days=retention_days)).date()
        return datetime(day.year, day.month, day.day, tzinfo=now.tzinfo)

    @staticmethod
    def select_expired(tables: Sequence[OutputTable], cutoff: datetime) -> List[str]:
        """Names of tables created strictly before cutoff."""
        return [table.name for table in tables if table.create_date < cutoff]

    def run(self, retention_days: int) -> CleanupResult:
        """
        Run the cleanup.

        Raises:
            RetentionGuardError: Nothing is listed or dropped
        """
        self.check_retention(retention_days)

        cutoff = self.cutoff_for(self.clock(), retention_days)
        tables = self.output_repo.list_output_tables(self.table_prefix, self.schema)
        expired = self.select_expired(tables, cutoff)
        result = CleanupResult(
            retention_days=retention_days,
            cutoff=cutoff,
            scanned=[t.name for t in tables],
        )

        batch = build_drop_batch(expired, self.schema)
        if batch is None:
            logger.info(f"✅ No output tables older than {cutoff.date()}; nothing to drop")
            return result

        logger.info(f"🗑️ Dropping {len(expired)} output table(s) created before {cutoff.date()}",
                    extra={'custom_dimensions': {'tables': expired}})
        self.output_repo.execute_batch(batch)
        result.batch = batch
        result.dropped = expired
        logger.info(f"✅ Cleanup complete: {len(expired)} dropped, {len(tables) - len(expired)} kept")
        return result
