"""Merges or copies each history file of two directories into a third."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field

from history_merge.errors import HistoryMergeError, LogIOError
from history_merge.fileops import copy_file
from history_merge.merger import merge_files

logger = logging.getLogger(__name__)


class Action(enum.Enum):
    MERGE = "merge"
    COPY_FIRST = "copy-first"
    COPY_SECOND = "copy-second"


@dataclass(frozen=True)
class PlanEntry:
    name: str
    action: Action


@dataclass
class ReconcileResult:
    merged: int = 0
    copied: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def list_files(directory: str, skip_hidden: bool = False) -> set[str]:
    """Names of the non-directory entries directly inside *directory*.

    Raises:
        LogIOError: the directory cannot be listed.
    """
    names = set()
    try:
        with os.scandir(directory) as it:
            for entry in it:
                if entry.is_dir():
                    continue
                if skip_hidden and entry.name.startswith("."):
                    continue
                names.add(entry.name)
    except OSError as e:
        raise LogIOError(e.strerror or str(e), path=directory) from e
    return names


def build_plan(dir_a: str, dir_b: str, skip_hidden: bool = False) -> list[PlanEntry]:
    """Classify every file name found in either directory.

    Names present in both become MERGE, the rest are copied from the side
    that has them. Entries are sorted by name.
    """
    names_a = list_files(dir_a, skip_hidden)
    names_b = list_files(dir_b, skip_hidden)

    plan = []
    for name in sorted(names_a | names_b):
        if name in names_a and name in names_b:
            action = Action.MERGE
        elif name in names_a:
            action = Action.COPY_FIRST
        else:
            action = Action.COPY_SECOND
        plan.append(PlanEntry(name, action))
    return plan


def ensure_output_dir(out_dir: str, create: bool = True) -> None:
    """Make sure *out_dir* exists as a directory, creating it if allowed."""
    if os.path.isdir(out_dir):
        return
    if not create:
        raise LogIOError("output directory does not exist", path=out_dir)
    try:
        os.makedirs(out_dir)
    except OSError as e:
        raise LogIOError(e.strerror or str(e), path=out_dir) from e
    logger.info("Created output directory %s", out_dir)


def apply_entry(entry: PlanEntry, dir_a: str, dir_b: str, out_dir: str) -> None:
    """Carry out a single plan entry."""
    path_a = os.path.join(dir_a, entry.name)
    path_b = os.path.join(dir_b, entry.name)
    path_out = os.path.join(out_dir, entry.name)

    if entry.action is Action.MERGE:
        merge_files(path_a, path_b, path_out)
    elif entry.action is Action.COPY_FIRST:
        copy_file(path_a, path_out)
    else:
        copy_file(path_b, path_out)


def reconcile(
    dir_a: str,
    dir_b: str,
    out_dir: str,
    skip_hidden: bool = False,
    create_output_dir: bool = True,
) -> ReconcileResult:
    """Reconcile two history directories into *out_dir*.

    A failure on one file is logged and recorded in the result; the
    remaining files are still processed. Failure to list either input or to
    prepare *out_dir* is raised immediately.
    """
    plan = build_plan(dir_a, dir_b, skip_hidden)
    ensure_output_dir(out_dir, create_output_dir)

    result = ReconcileResult()
    for entry in plan:
        try:
            apply_entry(entry, dir_a, dir_b, out_dir)
        except HistoryMergeError as e:
            logger.error("%s failed: %s", entry.name, e)
            result.failures[entry.name] = str(e)
            continue
        if entry.action is Action.MERGE:
            result.merged += 1
        else:
            result.copied += 1

    logger.info("Reconciled %s + %s -> %s: %d merged, %d copied, %d failed",
                dir_a, dir_b, out_dir, result.merged, result.copied,
                len(result.failures))
    return result
