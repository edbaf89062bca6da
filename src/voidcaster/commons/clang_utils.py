"""libclang-backed syntax tree provider"""

# System
from typing import Iterable, Optional, Sequence
import os
import shutil
import subprocess

# Utils
import clang.cindex
from clang.cindex import (
    Config,
    Cursor,
    CursorKind,
    Diagnostic,
    Index,
    TranslationUnitLoadError,
    TypeKind,
)

# Voidcaster
from voidcaster.commons.models import SourceLocation
from voidcaster.commons.syntax_tree import NodeKind, ReturnKind, SyntaxNode
from voidcaster.commons.utils import ExitCode
from voidcaster.logger import setup_logger

logger = setup_logger(__name__)

RESOURCE_SEARCH_PATHS = [
    '/usr/lib/clang',
    '/usr/local/lib/clang'
]


def configure_libclang(library_file: Optional[str]):
    """Points the bindings at a specific libclang shared library"""
    if not library_file:
        return
    if Config.loaded:
        logger.warning("libclang already loaded; ignoring %s", library_file)
        return
    Config.set_library_file(library_file)


def create_index() -> Index:
    """Creates a clang index, raising LibclangError if libclang cannot be loaded"""
    return clang.cindex.Index.create()


def get_clang_resource_dir() -> Optional[str]:
    """
    Attempt to find the Clang resource directory containing standard headers
    like stddef.h, stdarg.h, etc.
    """
    # 1. Ask the clang executable if it's in the PATH
    clang_exe = shutil.which('clang')
    if clang_exe:
        try:
            result = subprocess.run(
                [clang_exe, '-print-resource-dir'],
                capture_output=True,
                text=True,
                check=True
            )
            resource_dir = result.stdout.strip()
            if resource_dir and os.path.isdir(resource_dir):
                include_dir = os.path.join(resource_dir, 'include')
                if os.path.isdir(include_dir):
                    return include_dir
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("clang -print-resource-dir failed: %s", e)

    # 2. Look in common locations, newest version first
    for base in RESOURCE_SEARCH_PATHS:
        if os.path.isdir(base):
            try:
                versions = sorted(os.listdir(base), reverse=True)
            except OSError:
                continue
            for v in versions:
                include_path = os.path.join(base, v, 'include')
                if os.path.isdir(include_path):
                    return include_path

    return None


def build_clang_args(defines: Iterable[str], include_dirs: Iterable[str],
                     system_include: bool = True) -> list[str]:
    """Turns -D/-I option values into front end arguments"""
    args = [f"-D{define}" for define in defines]
    args.extend(f"-I{path}" for path in include_dirs)
    if system_include:
        resource_include = get_clang_resource_dir()
        if resource_include:
            args.append(f"-I{resource_include}")
        else:
            logger.debug("No clang resource include directory found")
    return args


def to_location(clang_location) -> SourceLocation:
    return SourceLocation(line=clang_location.line, column=clang_location.column)


def _cursor_kind(cursor: Cursor) -> Optional[CursorKind]:
    # Newer libclang releases hand out kinds the bindings do not know about
    try:
        return cursor.kind
    except ValueError:
        return None


class ClangNode(SyntaxNode):
    """A libclang cursor seen through the SyntaxNode interface"""

    def __init__(self, cursor: Cursor):
        self.cursor = cursor

    @property
    def kind(self) -> NodeKind:
        kind = _cursor_kind(self.cursor)
        if kind == CursorKind.COMPOUND_STMT:
            return NodeKind.COMPOUND_STMT
        if kind == CursorKind.CASE_STMT:
            return NodeKind.CASE_STMT
        if kind == CursorKind.CSTYLE_CAST_EXPR:
            if self.cursor.type.kind == TypeKind.VOID:
                return NodeKind.VOID_CAST
            return NodeKind.OTHER
        if kind == CursorKind.CALL_EXPR:
            return NodeKind.CALL_EXPR
        if kind == CursorKind.BINARY_OPERATOR:
            return NodeKind.BINARY_OPERATOR
        return NodeKind.OTHER

    @property
    def spelling(self) -> str:
        return self.cursor.spelling or ""

    @property
    def file_name(self) -> str:
        source_file = self.cursor.location.file
        return source_file.name if source_file else ""

    def location(self) -> SourceLocation:
        return to_location(self.cursor.location)

    def children(self) -> Sequence["ClangNode"]:
        return [ClangNode(child) for child in self.cursor.get_children()]

    def callee_return(self) -> ReturnKind:
        target = self.cursor.referenced
        if target is None or target.type.kind == TypeKind.FUNCTIONNOPROTO:
            return ReturnKind.UNRESOLVED

        result_kind = target.result_type.kind
        if result_kind == TypeKind.VOID:
            return ReturnKind.VOID
        if result_kind in (TypeKind.INVALID, TypeKind.UNEXPOSED):
            return ReturnKind.UNEXPOSED
        return ReturnKind.CONCRETE

    def cast_extent(self) -> Optional[tuple[SourceLocation, SourceLocation]]:
        """
        The cursor's own extent also covers the casted expression, so the
        cast is delimited by the leading tokens that annotate back to a
        cursor of the same kind and type as this one.
        """
        start = end = None
        for token in self.cursor.get_tokens():
            owner = token.cursor
            if _cursor_kind(owner) != _cursor_kind(self.cursor) or owner.type != self.cursor.type:
                # not part of our cast anymore
                break
            if start is None:
                start = to_location(token.extent.start)
            end = to_location(token.extent.end)

        if start is None or end is None:
            return None
        return start, end

    def describe(self) -> str:
        kind = _cursor_kind(self.cursor)
        kind_name = kind.name if kind is not None else "UNKNOWN"
        location = self.cursor.location
        return (f"node of kind {kind_name} named {self.cursor.displayname} "
                f"at {self.file_name}:{location.line}:{location.column}")


def parse_file(index: Index, file_path: str,
               clang_args: Sequence[str]) -> tuple[ExitCode, Optional[ClangNode]]:
    """
    Parses one file and reports its diagnostics. Returns the exit code to
    continue with and, when parsing succeeded, the root node of the tree.
    """
    try:
        with open(file_path, "rb"):
            pass
    except OSError as e:
        logger.error("%s: cannot open: %s", file_path, e.strerror)
        return ExitCode.FILE_OPEN, None

    try:
        tu = index.parse(file_path, args=list(clang_args))
    except TranslationUnitLoadError as e:
        logger.error("error parsing %s: %s", file_path, e)
        return ExitCode.CLANG_FAIL, None

    for diag in tu.diagnostics:
        logger.warning(diag.format())
        if diag.severity >= Diagnostic.Error:
            logger.error("Aborting parse.")
            return ExitCode.FILE_PARSE, None

    return ExitCode.OK, ClangNode(tu.cursor)

