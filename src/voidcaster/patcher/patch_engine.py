"""Applies queued modifications to the files they refer to.

Every location was computed against the unmodified source, so each file is
streamed once from its start with a cursor that tracks original
coordinates. Output goes to a staging file that replaces the original only
once it is complete; the original is kept as a backup.
"""

# System
from itertools import groupby
from operator import attrgetter
from typing import BinaryIO, Iterable, Optional
import os
import shutil
import tempfile

# Voidcaster
from voidcaster.commons.config import DEFAULT_BACKUP_SUFFIX
from voidcaster.commons.models import (
    InsertModification,
    Modification,
    PatchResult,
    RemoveModification,
    SourceLocation,
)
from voidcaster.commons.utils import PatchError, QueueDrainedError
from voidcaster.logger import setup_logger

logger = setup_logger(__name__)

START_OF_FILE = SourceLocation(line=1, column=1)
STAGING_PREFIX = "voidcaster"


class ModificationQueue:
    """Append-only during the scan phase, drained exactly once afterwards"""

    def __init__(self):
        self._modifications: list[Modification] = []
        self._drained = False

    def append(self, modification: Modification):
        if self._drained:
            raise QueueDrainedError("modification queue has already been drained")
        self._modifications.append(modification)

    def drain(self) -> list[Modification]:
        if self._drained:
            raise QueueDrainedError("modification queue has already been drained")
        modifications, self._modifications = self._modifications, []
        self._drained = True
        return modifications

    @property
    def drained(self) -> bool:
        return self._drained

    def __len__(self):
        return len(self._modifications)


def sort_modifications(modifications: Iterable[Modification]) -> list[Modification]:
    """
    Orders modifications by file, then by characteristic location. The sort
    is stable: modifications sharing a location keep their queueing order.
    """
    return sorted(
        modifications,
        key=lambda mod: (mod.file,
                         mod.characteristic_location.line,
                         mod.characteristic_location.column)
    )


def robust_rename(old_path: str, new_path: str):
    """Renames a file, copying and deleting if a plain rename is not possible."""
    try:
        os.replace(old_path, new_path)
        return
    except OSError as e:
        logger.debug("rename %s -> %s failed (%s); copying instead", old_path, new_path, e)

    shutil.copyfile(old_path, new_path)
    os.unlink(old_path)


def overwrite_with_backup(original_path: str, staging_path: str,
                          backup_suffix: str = DEFAULT_BACKUP_SUFFIX) -> str:
    """
    Moves the original aside to `original_path + backup_suffix` (replacing
    any older backup) and puts the staging file in its place.
    Returns the backup path.
    """
    backup_path = original_path + backup_suffix
    robust_rename(original_path, backup_path)
    try:
        robust_rename(staging_path, original_path)
    except OSError:
        # put the original back so its path never ends up empty
        robust_rename(backup_path, original_path)
        raise
    return backup_path


def advance(reader: BinaryIO, now: SourceLocation, target: SourceLocation,
            writer: Optional[BinaryIO] = None) -> SourceLocation:
    """
    Moves `reader` from right before `now` to right before `target`, copying
    the bytes passed over to `writer` if one is given. Returns the location
    reached, which is `target` unless `target` lies past the end of its line.
    """
    line, column = now.line, now.column
    while line < target.line or (line == target.line and column < target.column):
        byte = reader.read(1)
        if not byte:
            raise PatchError(f"reached end of file before {target}")

        if writer is not None:
            writer.write(byte)

        if byte == b"\n":
            line += 1
            column = 1
        else:
            column += 1

    return SourceLocation(line=line, column=column)


class PatchEngine:
    """Rewrites files according to a list of modifications"""

    def __init__(self, backup_suffix: str = DEFAULT_BACKUP_SUFFIX,
                 staging_dir: Optional[str] = None):
        self.backup_suffix = backup_suffix
        self.staging_dir = staging_dir

    def apply(self, modifications: Iterable[Modification]) -> PatchResult:
        """
        Applies all modifications, one file at a time. A failure aborts only
        the file it occurs in.
        """
        result = PatchResult()
        ordered = sort_modifications(modifications)

        for file_name, group in groupby(ordered, key=attrgetter("file")):
            try:
                backup_path = self.patch_file(file_name, list(group))
            except (OSError, PatchError) as e:
                logger.error("%s: %s", file_name, e)
                result.failed.append(file_name)
                continue
            logger.info("Patched %s (original kept as %s)", file_name, backup_path)
            result.patched.append(file_name)

        return result

    def patch_file(self, file_name: str, modifications: list[Modification]) -> str:
        """
        Rewrites a single file. `modifications` must all refer to `file_name`
        and be sorted by characteristic location. Returns the backup path.
        """
        with open(file_name, "rb") as reader:
            fd, staging_path = tempfile.mkstemp(prefix=STAGING_PREFIX, dir=self.staging_dir)
            try:
                with os.fdopen(fd, "wb") as writer:
                    self._rewrite(reader, writer, modifications)
            except BaseException:
                os.unlink(staging_path)
                raise

        try:
            shutil.copymode(file_name, staging_path)
            return overwrite_with_backup(file_name, staging_path, self.backup_suffix)
        except BaseException:
            if os.path.exists(staging_path):
                os.unlink(staging_path)
            raise

    def _rewrite(self, reader: BinaryIO, writer: BinaryIO, modifications: list[Modification]):
        current = START_OF_FILE

        for modification in modifications:
            target = modification.characteristic_location
            if target < current:
                logger.warning("%s:%s: overlaps an earlier modification; applying it at %s",
                               modification.file, target, current)

            current = advance(reader, current, target, writer)

            if isinstance(modification, InsertModification):
                writer.write(modification.text.encode("utf-8"))
            elif isinstance(modification, RemoveModification):
                current = advance(reader, current, modification.end)
            else:
                raise PatchError(f"unknown modification {modification!r}")

        shutil.copyfileobj(reader, writer)
