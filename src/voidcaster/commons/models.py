from functools import total_ordering
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

VOID_CAST = "(void)"


@total_ordering
class SourceLocation(BaseModel):
    """A 1-based line/column position inside one file.

    Locations order by line, then by column. Comparing locations that belong
    to different files is meaningless.
    """
    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    column: int = Field(ge=1)

    def __lt__(self, other):
        if not isinstance(other, SourceLocation):
            return NotImplemented
        return (self.line, self.column) < (other.line, other.column)

    def __str__(self):
        return f"{self.line}:{self.column}"


class MissingVoid(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["missing"] = "missing"
    file: str
    function_name: str
    location: SourceLocation

    def to_modification(self) -> "InsertModification":
        return InsertModification(file=self.file, where=self.location)


class SuperfluousVoid(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["superfluous"] = "superfluous"
    file: str
    function_name: str
    start: SourceLocation
    end: SourceLocation

    @model_validator(mode="after")
    def _check_range(self):
        if self.end < self.start:
            raise ValueError(f"cast ends ({self.end}) before it starts ({self.start})")
        return self

    def to_modification(self) -> "RemoveModification":
        return RemoveModification(file=self.file, start=self.start, end=self.end)


class InsertModification(BaseModel):
    """Splice `text` into `file` right before `where`."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["insert"] = "insert"
    file: str
    where: SourceLocation
    text: str = VOID_CAST

    @property
    def characteristic_location(self) -> SourceLocation:
        return self.where


class RemoveModification(BaseModel):
    """Drop everything in `file` from `start` up to (not including) `end`."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["remove"] = "remove"
    file: str
    start: SourceLocation
    end: SourceLocation

    @model_validator(mode="after")
    def _check_range(self):
        if self.end < self.start:
            raise ValueError(f"removal ends ({self.end}) before it starts ({self.start})")
        return self

    @property
    def characteristic_location(self) -> SourceLocation:
        return self.start


Finding = Union[MissingVoid, SuperfluousVoid]
Modification = Union[InsertModification, RemoveModification]


class ScanReport(BaseModel):
    """Outcome of the scan phase over all input files"""
    suggested: bool = False
    findings: list[Finding] = Field(default_factory=list)
    warnings: int = 0

    def record_finding(self, finding: Finding):
        self.findings.append(finding)

    def mark_suggested(self):
        self.suggested = True

    def record_warning(self):
        self.warnings += 1


class PatchResult(BaseModel):
    """Files rewritten by the patch engine, and files it had to give up on"""
    patched: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
