"""Shared fixtures: an in-memory syntax tree and a sink that records findings."""

from typing import Optional, Sequence

import pytest

from voidcaster.classifier.sinks import FindingSink
from voidcaster.commons.models import SourceLocation
from voidcaster.commons.syntax_tree import NodeKind, ReturnKind, SyntaxNode


def loc(line, column):
    return SourceLocation(line=line, column=column)


class FakeNode(SyntaxNode):
    """Hand-built tree node standing in for the front end"""

    def __init__(self, kind: NodeKind, children: Sequence["FakeNode"] = (),
                 spelling: str = "", line: int = 1, column: int = 1,
                 returns: ReturnKind = ReturnKind.CONCRETE,
                 extent: Optional[tuple] = None, file: str = "test.c"):
        self._kind = kind
        self._children = list(children)
        self._spelling = spelling
        self._location = loc(line, column)
        self._returns = returns
        self._extent = extent
        self._file = file

    @property
    def kind(self):
        return self._kind

    @property
    def spelling(self):
        return self._spelling

    @property
    def file_name(self):
        return self._file

    def location(self):
        return self._location

    def children(self):
        return self._children

    def callee_return(self):
        return self._returns

    def cast_extent(self):
        return self._extent


def call(name, line, column, returns=ReturnKind.CONCRETE, file="test.c"):
    return FakeNode(NodeKind.CALL_EXPR, spelling=name, line=line, column=column,
                    returns=returns, file=file)


def void_cast(start, end, *children):
    return FakeNode(NodeKind.VOID_CAST, children, extent=(start, end))


def compound(*children):
    return FakeNode(NodeKind.COMPOUND_STMT, children)


def other(*children):
    return FakeNode(NodeKind.OTHER, children)


def translation_unit(*statements):
    """A file holding one function whose body is `statements`"""
    return other(other(compound(*statements)))


class RecordingSink(FindingSink):

    def __init__(self):
        self.missing = []
        self.superfluous = []

    def missing_void(self, finding):
        self.missing.append(finding)

    def superfluous_void(self, finding):
        self.superfluous.append(finding)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def write_source(tmp_path):
    """Writes C source to a file under tmp_path and returns its path as str"""
    def _write(text, name="probe.c"):
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return str(path)
    return _write
