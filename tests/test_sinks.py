"""Tests for the warning reporter and the interactive prompt."""

import io
import logging

import pytest

from conftest import loc
from voidcaster.classifier.sinks import (
    InteractiveCollector,
    WarningReporter,
    fetch_bool_response,
)
from voidcaster.commons.models import (
    InsertModification,
    MissingVoid,
    RemoveModification,
    ScanReport,
    SuperfluousVoid,
)
from voidcaster.commons.utils import UserQuit
from voidcaster.patcher.patch_engine import ModificationQueue

SOURCE = (
    "int answer(void);\n"
    "void nothing(void);\n"
    "void probe(void)\n"
    "{\n"
    "\tanswer();\n"
    "\t(void)nothing();\n"
    "}\n"
)


def missing(path):
    return MissingVoid(file=path, function_name="answer", location=loc(5, 2))


def superfluous(path):
    return SuperfluousVoid(file=path, function_name="nothing", start=loc(6, 2), end=loc(6, 8))


class TestWarningReporter:

    def test_missing_void_message(self, caplog):
        caplog.set_level(logging.WARNING)
        report = ScanReport()
        WarningReporter(report).missing_void(missing("probe.c"))

        assert caplog.messages == [
            "probe.c:5:2: Missing cast to void when calling function answer."
        ]
        assert report.suggested

    def test_superfluous_void_message(self, caplog):
        caplog.set_level(logging.WARNING)
        report = ScanReport()
        WarningReporter(report).superfluous_void(superfluous("probe.c"))

        assert caplog.messages == [
            "probe.c:6:2: Pointless cast to void when calling function nothing."
        ]
        assert report.suggested


class TestFetchBoolResponse:

    @pytest.mark.parametrize("answer, expected", [
        ("y\n", True),
        ("Y\n", True),
        ("n\n", False),
        ("N\r\n", False),
    ])
    def test_accepted_answers(self, answer, expected):
        stdout = io.StringIO()

        assert fetch_bool_response(io.StringIO(answer), stdout) is expected
        assert stdout.getvalue() == ""

    def test_asks_again_until_answer_is_valid(self):
        stdout = io.StringIO()

        assert fetch_bool_response(io.StringIO("yes\n\nmaybe\nn\n"), stdout) is False
        assert stdout.getvalue() == "Please answer y (yes) or n (no): " * 3

    def test_end_of_input_quits(self):
        with pytest.raises(UserQuit):
            fetch_bool_response(io.StringIO(""), io.StringIO())

    def test_answer_cut_off_by_end_of_input_quits(self):
        stdout = io.StringIO()

        with pytest.raises(UserQuit):
            fetch_bool_response(io.StringIO("y"), stdout)
        assert stdout.getvalue() == "Please answer y (yes) or n (no): "


class TestInteractiveCollector:

    def collector(self, answers):
        queue = ModificationQueue()
        stdout = io.StringIO()
        return InteractiveCollector(queue, io.StringIO(answers), stdout), queue, stdout

    def test_accepted_missing_void_is_queued(self, write_source):
        path = write_source(SOURCE)
        collector, queue, stdout = self.collector("y\n")
        collector.missing_void(missing(path))

        assert queue.drain() == [InsertModification(file=path, where=loc(5, 2))]
        shown = stdout.getvalue()
        assert f"File {path}, line 5:" in shown
        assert "Missing cast to void when calling function 'answer'." in shown
        assert "\tanswer();\n" in shown
        assert "\t(void)answer();\n" in shown
        assert shown.endswith("Apply fix? (y/n) ")

    def test_rejected_fix_is_not_queued(self, write_source):
        path = write_source(SOURCE)
        collector, queue, _ = self.collector("n\n")
        collector.missing_void(missing(path))

        assert len(queue) == 0

    def test_accepted_superfluous_void_is_queued(self, write_source):
        path = write_source(SOURCE)
        collector, queue, stdout = self.collector("Y\n")
        collector.superfluous_void(superfluous(path))

        assert queue.drain() == [
            RemoveModification(file=path, start=loc(6, 2), end=loc(6, 8))
        ]
        shown = stdout.getvalue()
        assert f"File {path}, lines 6 through 6:" in shown
        assert "\t(void)nothing();\n" in shown
        assert "\tnothing();\n" in shown

    def test_end_of_input_propagates(self, write_source):
        path = write_source(SOURCE)
        collector, queue, _ = self.collector("")

        with pytest.raises(UserQuit):
            collector.missing_void(missing(path))
        assert len(queue) == 0
