"""Finding sinks: what happens to a finding once the classifier emits it"""

# System
from abc import ABC, abstractmethod
from typing import TextIO
import sys

# Voidcaster
from voidcaster.commons.models import MissingVoid, ScanReport, SuperfluousVoid, VOID_CAST
from voidcaster.commons.utils import UserQuit
from voidcaster.logger import setup_logger
from voidcaster.patcher.patch_engine import ModificationQueue
from voidcaster.patcher.source_lines import (
    as_text,
    fetch_file_lines,
    preview_insert,
    preview_remove,
)

logger = setup_logger(__name__)

ACCEPT_ANSWERS = ("y", "Y")
REJECT_ANSWERS = ("n", "N")

MISSING_VOID_PROMPT = """
File {file}, line {line}:
Missing cast to void when calling function '{function}'.
The line, currently:
{before}
The line, after its modification:
{after}
Apply fix? (y/n) """

SUPERFLUOUS_VOID_PROMPT = """
File {file}, lines {first_line} through {last_line}:
Superfluous cast to void when calling function '{function}'.
The lines, currently:
{before}
The lines, after their modification:
{after}
Apply fix? (y/n) """


class FindingSink(ABC):
    """Receives the findings of the classifier"""

    @abstractmethod
    def missing_void(self, finding: MissingVoid):
        """A call discards a non-void result without a cast to void."""

    @abstractmethod
    def superfluous_void(self, finding: SuperfluousVoid):
        """A call returning void is wrapped in a cast to void."""


class WarningReporter(FindingSink):
    """Prints one diagnostic per finding and notes that a suggestion was made"""

    def __init__(self, report: ScanReport):
        self.report = report

    def missing_void(self, finding: MissingVoid):
        logger.warning(
            "%s:%d:%d: Missing cast to void when calling function %s.",
            finding.file, finding.location.line, finding.location.column,
            finding.function_name
        )
        self.report.mark_suggested()

    def superfluous_void(self, finding: SuperfluousVoid):
        logger.warning(
            "%s:%d:%d: Pointless cast to void when calling function %s.",
            finding.file, finding.start.line, finding.start.column,
            finding.function_name
        )
        self.report.mark_suggested()


def fetch_bool_response(stdin: TextIO, stdout: TextIO) -> bool:
    """
    Reads answers until one of y/Y/n/N alone on a line arrives.
    Raises UserQuit when the input runs out.
    """
    while True:
        answer = stdin.readline()
        if not answer:
            raise UserQuit("end of input at the prompt")

        if answer[1:] in ("\n", "\r\n"):
            if answer[0] in ACCEPT_ANSWERS:
                return True
            if answer[0] in REJECT_ANSWERS:
                return False

        stdout.write("Please answer y (yes) or n (no): ")
        stdout.flush()


class InteractiveCollector(FindingSink):
    """Shows each proposed fix, asks for a decision and queues accepted fixes"""

    def __init__(self, queue: ModificationQueue, stdin: TextIO = None, stdout: TextIO = None):
        self.queue = queue
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def _ask(self, prompt: str) -> bool:
        self.stdout.write(prompt)
        self.stdout.flush()
        return fetch_bool_response(self.stdin, self.stdout)

    def missing_void(self, finding: MissingVoid):
        line = fetch_file_lines(finding.file, finding.location.line) or b""
        prompt = MISSING_VOID_PROMPT.format(
            file=finding.file,
            line=finding.location.line,
            function=finding.function_name,
            before=as_text(line),
            after=preview_insert(line, finding.location.column, VOID_CAST),
        )
        if self._ask(prompt):
            self.queue.append(finding.to_modification())

    def superfluous_void(self, finding: SuperfluousVoid):
        first_line, last_line = finding.start.line, finding.end.line
        lines = fetch_file_lines(finding.file, first_line, last_line - first_line + 1) or b""
        prompt = SUPERFLUOUS_VOID_PROMPT.format(
            file=finding.file,
            first_line=first_line,
            last_line=last_line,
            function=finding.function_name,
            before=as_text(lines),
            after=preview_remove(lines, first_line, finding.start, finding.end),
        )
        if self._ask(prompt):
            self.queue.append(finding.to_modification())
