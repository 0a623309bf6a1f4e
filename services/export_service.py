"""
Export Service - Dated CSV snapshots of recent diagnostic output tables.

Python rendition of the export job body. Layout:

    {export_path}/RawExport_{YYYYMMDD}/{table}.csv

One file per 'Blitz%' table created within the last day, header row plus
one line per source row. Each file is written to {table}.csv.tmp and moved
over the target with os.replace(), so a rerun on the same day overwrites
and a failed table never leaves a truncated CSV. Failures are collected;
files of the other tables are kept and ExportPartialFailure is raised at
the end.

Exports:
    ExportService: Export coordinator
    ExportResult: Outcome of one export run
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

import pandas as pd

from config.defaults import ExportDefaults, FrkDefaults
from config.frk_config import FrkConfig
from core.models import OutputTable
from exceptions import ExportPartialFailure
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ExportService")


@dataclass
class ExportResult:
    """Result of an export run."""
    export_dir: str
    exported: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "export_dir": self.export_dir,
            "success": self.success,
            "exported": self.exported,
            "files": self.files,
            "failures": self.failures,
        }


class ExportService:
    """
    CSV export of the storage database.

    Usage:
        service = ExportService(OutputTableRepository("DBAtools"))
        result = service.run(config)
    """

    def __init__(
        self,
        output_repo,
        clock: Callable[[], datetime] = datetime.now,
        table_prefix: str = FrkDefaults.OUTPUT_TABLE_PREFIX,
        schema: str = FrkDefaults.OUTPUT_SCHEMA,
    ):
        self.output_repo = output_repo
        self.clock = clock
        self.table_prefix = table_prefix
        self.schema = schema

    @staticmethod
    def export_dir_for(export_path: str, now: datetime) -> Path:
        folder = f"{ExportDefaults.FOLDER_PREFIX}{now.strftime(ExportDefaults.DATE_FORMAT)}"
        return Path(export_path) / folder

    @staticmethod
    def select_recent(tables: Sequence[OutputTable], now: datetime) -> List[str]:
        """Tables created within the look-back window (create_date >= now - 1 day)."""
        since = now - timedelta(days=ExportDefaults.LOOKBACK_DAYS)
        return [table.name for table in tables if table.create_date >= since]

    @staticmethod
    def write_csv(frame: pd.DataFrame, target: Path) -> None:
        """Write via a temp file and replace the target in one step."""
        temp = target.with_name(target.name + ExportDefaults.TEMP_SUFFIX)
        try:
            frame.to_csv(temp, index=False, encoding="utf-8")
            os.replace(temp, target)
        except BaseException:
            if temp.exists():
                temp.unlink()
            raise

    def run(self, config: FrkConfig) -> ExportResult:
        """
        Export every recent output table.

        Raises:
            ExportPartialFailure: One or more tables were not written
        """
        now = self.clock()
        export_dir = self.export_dir_for(config.export_path, now)
        result = ExportResult(export_dir=str(export_dir))

        export_dir.mkdir(parents=True, exist_ok=True)
        tables = self.select_recent(
            self.output_repo.list_output_tables(self.table_prefix, self.schema), now
        )
        if not tables:
            logger.info("No new tables found for local export.")
            return result

        for table in tables:
            target = export_dir / f"{table}{ExportDefaults.FILE_EXTENSION}"
            try:
                frame = self.output_repo.fetch_table(table, self.schema)
                self.write_csv(frame, target)
            except Exception as e:
                logger.error(f"❌ Export of {table} failed: {e}")
                result.failures[table] = str(e)
                continue
            result.exported.append(table)
            result.files.append(str(target))
            logger.info(f"📄 Exported {table} ({len(frame)} rows) to {target}")

        if result.failures:
            raise ExportPartialFailure(result.exported, result.failures)

        logger.info(f"✅ Local export completed successfully to {export_dir}.")
        return result
