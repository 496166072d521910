"""Flattening and rollup of project structure trees."""
import logging
from dataclasses import dataclass

from editor_activity.schemas.structure import FileStat, FolderNode, ProjectStructure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlatFileRecord:
    """A file's counters paired with the slash-joined path of its folder."""
    file_name: str
    folder_path: str
    idle_duration: float
    total_duration: float
    keystrokes_count: int
    file_switch_count: int


@dataclass
class StructureTotals:
    """Summed counters across every file in a structure."""
    total_keystrokes_count: int = 0
    total_file_switch_count: int = 0
    total_idle_duration: float = 0
    total_all_duration: float = 0
    total_focus_duration: float = 0
    data_integrity_warning: bool = False
    file_count: int = 0

    def add(self, stat: FileStat) -> None:
        self.total_keystrokes_count += stat.keystrokes_count
        self.total_file_switch_count += stat.file_switch_count
        self.total_idle_duration += stat.idle_duration
        self.total_all_duration += stat.total_duration
        self.file_count += 1


def _join_path(parent_path: str, folder_name: str) -> str:
    return f"{parent_path}/{folder_name}" if parent_path else folder_name


def flatten(structure: ProjectStructure) -> tuple[list[FlatFileRecord], StructureTotals]:
    """Flatten a structure tree into per-file records and summed totals.

    Folders are visited depth-first in pre-order, preserving input order:
    a folder's own files come before the files of its subfolders. Files at
    the project root get an empty ``folder_path``.

    ``total_focus_duration`` is ``total_all_duration - total_idle_duration``.
    If input files report more idle than total time the difference would be
    negative; that is logged, flagged via ``data_integrity_warning`` and the
    focus total is clamped to zero.

    Args:
        structure: Decoded project structure

    Returns:
        Tuple of (flat file records in encounter order, totals)
    """
    files: list[FlatFileRecord] = []
    totals = StructureTotals()

    def _emit(stats: list[FileStat], folder_path: str) -> None:
        for stat in stats:
            files.append(
                FlatFileRecord(
                    file_name=stat.file_name,
                    folder_path=folder_path,
                    idle_duration=stat.idle_duration,
                    total_duration=stat.total_duration,
                    keystrokes_count=stat.keystrokes_count,
                    file_switch_count=stat.file_switch_count,
                )
            )
            totals.add(stat)

    _emit(structure.files, "")

    # Explicit stack; children pushed in reverse so they pop in input order
    stack: list[tuple[FolderNode, str]] = [(folder, "") for folder in reversed(structure.folders)]
    while stack:
        folder, parent_path = stack.pop()
        current_path = _join_path(parent_path, folder.folder_name)
        _emit(folder.files, current_path)
        stack.extend((child, current_path) for child in reversed(folder.folders))

    focus = totals.total_all_duration - totals.total_idle_duration
    if focus < 0:
        logger.warning(
            f"Structure {structure.project_name!r} reports more idle time ({totals.total_idle_duration}) "
            f"than total time ({totals.total_all_duration}); clamping focus duration to 0"
        )
        totals.data_integrity_warning = True
        focus = 0
    totals.total_focus_duration = focus

    return files, totals
