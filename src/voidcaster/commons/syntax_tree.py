"""Syntax tree node base class"""

# System
from abc import ABC, abstractmethod
from typing import Optional, Sequence
import enum

# Voidcaster
from voidcaster.commons.models import SourceLocation


class NodeKind(enum.Enum):
    """The node kinds the classifier distinguishes; everything else is OTHER"""
    COMPOUND_STMT = "compound_stmt"
    CASE_STMT = "case_stmt"
    VOID_CAST = "void_cast"
    CALL_EXPR = "call_expr"
    BINARY_OPERATOR = "binary_operator"
    OTHER = "other"


class ReturnKind(enum.Enum):
    """What the front end knows about the value returned by a call"""
    UNRESOLVED = "unresolved"  # no declaration, or declared without a prototype
    UNEXPOSED = "unexposed"
    VOID = "void"
    CONCRETE = "concrete"


class SyntaxNode(ABC):
    """Base class for a node handed out by a syntax tree provider"""

    @property
    @abstractmethod
    def kind(self) -> NodeKind:
        """Kind of the node."""

    @property
    @abstractmethod
    def spelling(self) -> str:
        """Name of the node; the called function for call expressions."""

    @property
    @abstractmethod
    def file_name(self) -> str:
        """Name of the file the node is located in, or '' if none."""

    @abstractmethod
    def location(self) -> SourceLocation:
        """Location of the node inside its file."""

    @abstractmethod
    def children(self) -> Sequence["SyntaxNode"]:
        """Child nodes in document order."""

    @abstractmethod
    def callee_return(self) -> ReturnKind:
        """Return kind of the declaration a call expression refers to."""

    @abstractmethod
    def cast_extent(self) -> Optional[tuple[SourceLocation, SourceLocation]]:
        """Start and end of the tokens making up a cast, or None if unknown."""

    def describe(self) -> str:
        """Short human-readable description used by debug logging."""
        return f"{self.kind.value} {self.spelling}"
