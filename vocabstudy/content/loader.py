"""
Vocabulary loader for CSV files.

Expected header (only infinitive and hint are required):

    infinitive,part_of_speech,known_lang,learning_lang,hint,user_notes,alternates

`alternates` holds extra accepted answers separated by "|".
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from vocabstudy.models import VocabItem
from vocabstudy.store.base import ProgressStore

REQUIRED_COLUMNS = frozenset({"infinitive", "hint"})
OPTIONAL_COLUMNS = ("part_of_speech", "known_lang", "learning_lang", "user_notes")


@dataclass
class ImportReport:
    """Result of importing one or more files."""

    files: int = 0
    imported: list[VocabItem] = field(default_factory=list)
    skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.imported)


class VocabularyLoader:
    """Load vocab rows from CSV and add them through a progress store."""

    def __init__(self, store: ProgressStore):
        self.store = store

    def read_rows(self, path: Path | str, report: ImportReport | None = None) -> Iterator[dict]:
        """
        Yield cleaned field dicts for each valid row.

        Rows without an infinitive are logged and counted on `report`.

        Raises:
            FileNotFoundError: path does not exist
            ValueError: the header lacks a required column
        """
        path = Path(path)
        with path.open(encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            columns = {name.strip() for name in reader.fieldnames or []}
            missing = REQUIRED_COLUMNS - columns
            if missing:
                raise ValueError(f"{path.name}: missing columns {', '.join(sorted(missing))}")

            for line_no, row in enumerate(reader, start=2):
                row = {(k or "").strip(): (v or "").strip() for k, v in row.items()}
                if not row.get("infinitive"):
                    logger.warning(f"{path.name}:{line_no}: empty infinitive, skipping")
                    if report is not None:
                        report.skipped += 1
                    continue

                fields = {name: row.get(name, "") for name in OPTIONAL_COLUMNS}
                fields["hint"] = row.get("hint", "")
                fields["alternates"] = tuple(
                    alt.strip() for alt in row.get("alternates", "").split("|") if alt.strip()
                )
                yield {"infinitive": row["infinitive"], **fields}

    def import_file(self, path: Path | str, report: ImportReport | None = None) -> ImportReport:
        report = report or ImportReport()
        for fields in self.read_rows(path, report):
            report.imported.append(self.store.add_vocab_item(**fields))
        report.files += 1
        logger.info(f"Imported {report.count} vocab items from {Path(path).name}")
        return report

    def import_directory(self, directory: Path | str, pattern: str = "*.csv") -> ImportReport:
        """Import every matching file in a directory, in name order."""
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Vocabulary directory not found: {directory}")

        report = ImportReport()
        for path in sorted(directory.glob(pattern)):
            self.import_file(path, report)
        if report.files == 0:
            logger.warning(f"No {pattern} files found in {directory}")
        return report
