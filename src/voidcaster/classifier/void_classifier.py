"""Decides, for every call expression in a syntax tree, whether a cast to void
is missing, superfluous, or neither."""

# System
from dataclasses import dataclass
from typing import Optional
import logging

# Voidcaster
from voidcaster.classifier.sinks import FindingSink
from voidcaster.commons.models import (
    MissingVoid,
    ScanReport,
    SourceLocation,
    SuperfluousVoid,
)
from voidcaster.commons.syntax_tree import NodeKind, ReturnKind, SyntaxNode
from voidcaster.logger import setup_logger

logger = setup_logger(__name__)

STATEMENT_KINDS = (NodeKind.COMPOUND_STMT, NodeKind.CASE_STMT)


@dataclass(frozen=True)
class DescentState:
    """State handed from a node to each of its children."""
    depth: int = 0
    # the node sits directly inside a cast to void
    void_cast_above: bool = False
    # the node is a statement of a statement list, so its value is discarded
    compound_stmt_above: bool = False
    # extent of the cast; only meaningful if void_cast_above
    cast_start: Optional[SourceLocation] = None
    cast_end: Optional[SourceLocation] = None


class VoidClassifier:
    """
    Walks a syntax tree depth-first in document order and reports every
    missing or superfluous cast to void to the given sink.

    Known gap: a cast to void applied to one operand of a comma expression
    is not inspected.
    """

    def __init__(self, sink: FindingSink, report: Optional[ScanReport] = None):
        self.sink = sink
        self.report = report if report is not None else ScanReport()

    def classify(self, root: SyntaxNode) -> ScanReport:
        """Classifies every call below `root` (the root itself is not judged)."""
        initial = DescentState()
        # (node, state inherited from its parent); children pushed in reverse
        # so they are popped in document order
        stack = [(child, initial) for child in reversed(root.children())]

        while stack:
            node, state = stack.pop()
            child_state = self.visit(node, state)
            for child in reversed(node.children()):
                stack.append((child, child_state))

        return self.report

    def visit(self, node: SyntaxNode, state: DescentState) -> DescentState:
        """Judges a single node and returns the state for its children."""
        kind = node.kind
        child_state = DescentState(depth=state.depth + 1)

        if kind in STATEMENT_KINDS:
            child_state = DescentState(depth=state.depth + 1, compound_stmt_above=True)
        elif kind == NodeKind.VOID_CAST:
            extent = node.cast_extent()
            if extent is None:
                logger.warning("%s:%s: Warning: can't locate the tokens of a cast to void.",
                               node.file_name, node.location())
                extent = (None, None)
            child_state = DescentState(
                depth=state.depth + 1,
                void_cast_above=True,
                cast_start=extent[0],
                cast_end=extent[1],
            )
        elif kind == NodeKind.CALL_EXPR:
            self._judge_call(node, state)
        elif kind == NodeKind.BINARY_OPERATOR:
            # comma expressions are not inspected for casts to void
            pass
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("At level %d, visiting %s.", state.depth, node.describe())

        return child_state

    def _judge_call(self, node: SyntaxNode, state: DescentState):
        file_name = node.file_name
        function_name = node.spelling
        location = node.location()
        return_kind = node.callee_return()

        if return_kind == ReturnKind.UNRESOLVED:
            logger.warning(
                "%s:%d:%d: Warning: can't check call to %s (can't find original definition).",
                file_name, location.line, location.column, function_name
            )
            self.report.record_warning()
        elif return_kind == ReturnKind.UNEXPOSED:
            logger.debug("%s:%s: can't judge the return type of %s; skipping.",
                         file_name, location, function_name)
        elif return_kind == ReturnKind.VOID:
            if state.void_cast_above and state.cast_start is not None:
                finding = SuperfluousVoid(
                    file=file_name,
                    function_name=function_name,
                    start=state.cast_start,
                    end=state.cast_end,
                )
                self.report.record_finding(finding)
                self.sink.superfluous_void(finding)
        elif state.compound_stmt_above and not state.void_cast_above:
            finding = MissingVoid(
                file=file_name,
                function_name=function_name,
                location=location,
            )
            self.report.record_finding(finding)
            self.sink.missing_void(finding)
