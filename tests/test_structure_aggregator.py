"""Tests for structure flattening and totals."""
import logging
import random

import pytest

from editor_activity.schemas.structure import FileStat, FolderNode, ProjectStructure
from editor_activity.services.structure_aggregator import FlatFileRecord, flatten


def _structure(data: dict) -> ProjectStructure:
    return ProjectStructure.model_validate(data)


def test_single_nested_file():
    structure = _structure({
        "project_name": "p",
        "folders": [
            {
                "folder_name": "src",
                "files": [
                    {
                        "file_name": "a.ts",
                        "idle_duration": 5,
                        "total_duration": 20,
                        "keystrokes_count": 100,
                        "file_switch_count": 2,
                    }
                ],
                "folders": [],
            }
        ],
    })

    files, totals = flatten(structure)

    assert files == [
        FlatFileRecord(
            file_name="a.ts",
            folder_path="src",
            idle_duration=5,
            total_duration=20,
            keystrokes_count=100,
            file_switch_count=2,
        )
    ]
    assert totals.total_keystrokes_count == 100
    assert totals.total_file_switch_count == 2
    assert totals.total_idle_duration == 5
    assert totals.total_all_duration == 20
    assert totals.total_focus_duration == 15
    assert totals.data_integrity_warning is False
    assert totals.file_count == 1


def test_preorder_encounter_order(sample_structure):
    """Root files first, then each folder's own files before its subfolders."""
    files, totals = flatten(_structure(sample_structure))

    assert [(f.folder_path, f.file_name) for f in files] == [
        ("", "README.md"),
        ("src", "a.ts"),
        ("src/utils", "b.ts"),
        ("test", "a.test.ts"),
    ]
    assert totals.file_count == 4
    assert totals.total_keystrokes_count == 175
    assert totals.total_file_switch_count == 8
    assert totals.total_idle_duration == 9
    assert totals.total_all_duration == 40
    assert totals.total_focus_duration == 31


def test_siblings_keep_input_order():
    structure = _structure({
        "folders": [
            {"folder_name": "b", "files": [{"file_name": "1"}]},
            {"folder_name": "a", "files": [{"file_name": "2"}]},
            {"folder_name": "c", "files": [{"file_name": "3"}]},
        ],
    })

    files, _ = flatten(structure)

    assert [f.folder_path for f in files] == ["b", "a", "c"]


def test_deep_nesting_builds_slash_joined_paths():
    folder = {"folder_name": "level9", "files": [{"file_name": "leaf.py", "total_duration": 3}]}
    for depth in range(8, -1, -1):
        folder = {"folder_name": f"level{depth}", "folders": [folder]}

    files, totals = flatten(_structure({"folders": [folder]}))

    assert len(files) == 1
    assert files[0].folder_path == "/".join(f"level{i}" for i in range(10))
    assert totals.total_all_duration == 3


def test_very_deep_tree_does_not_recurse():
    """Depth well past the interpreter's recursion limit is handled."""
    depth = 2000
    root = ProjectStructure()

    current = FolderNode(folder_name="d0")
    root.folders.append(current)
    for i in range(1, depth):
        child = FolderNode(folder_name=f"d{i}")
        current.folders.append(child)
        current = child
    current.files.append(FileStat(file_name="bottom.txt", keystrokes_count=1))

    files, totals = flatten(root)

    assert len(files) == 1
    assert files[0].folder_path.count("/") == depth - 1
    assert totals.total_keystrokes_count == 1


def test_empty_structure():
    files, totals = flatten(ProjectStructure())

    assert files == []
    assert totals.file_count == 0
    assert totals.total_keystrokes_count == 0
    assert totals.total_focus_duration == 0
    assert totals.data_integrity_warning is False


def test_empty_folders_contribute_nothing():
    files, totals = flatten(_structure({
        "folders": [{"folder_name": "empty", "folders": [{"folder_name": "also-empty"}]}],
    }))

    assert files == []
    assert totals.total_all_duration == 0


def test_idle_above_total_is_clamped_and_flagged(caplog):
    structure = _structure({
        "project_name": "skewed",
        "folders": [
            {
                "folder_name": "src",
                "files": [{"file_name": "x.py", "idle_duration": 50, "total_duration": 10}],
            }
        ],
    })

    with caplog.at_level(logging.WARNING, logger="editor_activity.services.structure_aggregator"):
        files, totals = flatten(structure)

    assert totals.total_idle_duration == 50
    assert totals.total_all_duration == 10
    assert totals.total_focus_duration == 0
    assert totals.data_integrity_warning is True
    assert files[0].idle_duration == 50
    assert "clamping focus duration" in caplog.text


def test_one_file_overrun_offset_by_project_totals():
    """One file over-reports idle time, but the project as a whole does not."""
    files, totals = flatten(_structure({
        "files": [
            {"file_name": "a", "idle_duration": 8, "total_duration": 2},
            {"file_name": "b", "idle_duration": 0, "total_duration": 10},
        ],
    }))

    assert totals.total_focus_duration == 4
    assert totals.data_integrity_warning is False


def _random_file(rng: random.Random, index: int) -> dict:
    total = rng.choice([rng.randint(0, 500), rng.randint(0, 1000) / 4])
    idle = rng.uniform(0, total) if rng.random() < 0.5 else rng.randint(0, int(total))
    return {
        "file_name": f"file{index}.ts",
        "idle_duration": idle,
        "total_duration": total,
        "keystrokes_count": rng.randint(0, 5000),
        "file_switch_count": rng.randint(0, 50),
    }


def _random_folder(rng: random.Random, depth: int, max_depth: int, counter: list[int]) -> dict:
    files = []
    for _ in range(rng.randint(0, 4)):
        counter[0] += 1
        files.append(_random_file(rng, counter[0]))

    folders = []
    if depth < max_depth:
        folders = [
            _random_folder(rng, depth + 1, max_depth, counter)
            for _ in range(rng.randint(0, 3))
        ]

    return {"folder_name": f"dir{depth}_{counter[0]}", "files": files, "folders": folders}


def _random_structure(seed: int) -> ProjectStructure:
    rng = random.Random(seed)
    counter = [0]
    root = _random_folder(rng, 0, rng.randint(0, 6), counter)
    return _structure({"project_name": f"seed-{seed}", "files": root["files"], "folders": root["folders"]})


@pytest.mark.parametrize("seed", range(50))
def test_generated_trees_have_non_negative_focus(seed):
    """Any tree whose files all have idle <= total rolls up to non-negative focus."""
    files, totals = flatten(_random_structure(seed))

    assert all(f.idle_duration <= f.total_duration for f in files)
    assert totals.total_focus_duration >= 0
    assert totals.data_integrity_warning is False

    assert totals.file_count == len(files)
    assert totals.total_keystrokes_count == sum(f.keystrokes_count for f in files)
    assert totals.total_file_switch_count == sum(f.file_switch_count for f in files)
    assert totals.total_idle_duration == sum(f.idle_duration for f in files)
    assert totals.total_all_duration == sum(f.total_duration for f in files)
    assert totals.total_focus_duration == totals.total_all_duration - totals.total_idle_duration
