""" Voidcaster command-line entry point """

# System
from typing import Optional, Sequence
import argparse
import sys

# Utils
from clang.cindex import Index, LibclangError
from dotenv import load_dotenv
from pydantic import ValidationError

# Voidcaster
from voidcaster.classifier.sinks import FindingSink, InteractiveCollector, WarningReporter
from voidcaster.classifier.void_classifier import VoidClassifier
from voidcaster.commons.clang_utils import (
    build_clang_args,
    configure_libclang,
    create_index,
    parse_file,
)
from voidcaster.commons.config import Settings
from voidcaster.commons.models import ScanReport
from voidcaster.commons.utils import VERSION, ExitCode, UserQuit
from voidcaster.logger import init_logging, setup_logger
from voidcaster.patcher.patch_engine import ModificationQueue, PatchEngine

EXIT_STATUS_HELP = """
Exit status:
 0  if OK
 1  if command-line arguments were specified incorrectly
 2  if a file could not be opened
 3  if a file could not be parsed
 4  if -s is set and a suggestion was given
 5  if libclang failed internally
 6  if memory management fails
"""

# Flags which only make sense once
SINGLE_USE_FLAGS = {
    "no_system_include": "-g",
    "interactive": "-i",
    "extended_status": "-s",
}


class VoidcasterArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with the usage exit code"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(ExitCode.USAGE, f"{self.prog}: error: {message}\n")


def get_parser():
    """ Create parser for CLI options """
    parser = VoidcasterArgumentParser(
        prog="voidcaster",
        description="Proposes locations for casts to void in a C program.",
        epilog=EXIT_STATUS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-D",
        dest="defines",
        action="append",
        default=[],
        metavar="MACRO[=VALUE]",
        help="macro to define"
    )
    parser.add_argument(
        "-I",
        dest="include_dirs",
        action="append",
        default=[],
        metavar="PATH",
        help="add a path where the preprocessor shall search for includes"
    )
    parser.add_argument(
        "-g",
        dest="no_system_include",
        action="count",
        default=0,
        help="don't add the include path of the installed clang automatically"
    )
    parser.add_argument(
        "-i",
        dest="interactive",
        action="count",
        default=0,
        help="interactive mode"
    )
    parser.add_argument(
        "-s",
        dest="extended_status",
        action="count",
        default=0,
        help="exit with code 4 if a suggestion is given"
    )
    parser.add_argument(
        "--log_file",
        help="Path where log file should be saved."
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="log every visited node of the syntax tree"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}"
    )
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="C source files to inspect"
    )
    return parser


def warn_pointless_flags(args, logger):
    """ Warn about flags given more than once """
    for dest, flag in SINGLE_USE_FLAGS.items():
        if getattr(args, dest) > 1:
            logger.warning("Warning: it is pointless to specify %s multiple times.", flag)


def process_files(index: Index, files: Sequence[str], clang_args: Sequence[str],
                  classifier: VoidClassifier) -> ExitCode:
    """ Classify each file in turn, stopping at the first one that fails """
    logger = setup_logger(__name__)

    for file_path in files:
        logger.debug("Processing %s", file_path)
        ret, root = parse_file(index, file_path, clang_args)
        if ret != ExitCode.OK:
            # parse_file already logged a diagnostic; just stop
            return ret
        classifier.classify(root)

    return ExitCode.OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point"""
    load_dotenv()

    parser = get_parser()
    args = parser.parse_args(argv)

    init_logging(args.log_file, args.debug)
    logger = setup_logger(__name__)

    warn_pointless_flags(args, logger)

    if not args.files:
        logger.error("%s: no file specified", parser.prog)
        parser.print_usage(sys.stderr)
        return ExitCode.USAGE

    try:
        settings = Settings.from_env()
    except ValidationError as e:
        logger.error("%s: invalid configuration: %s", parser.prog, e)
        return ExitCode.USAGE

    try:
        configure_libclang(settings.libclang_path)
        index = create_index()
    except LibclangError as e:
        logger.error("%s: clang index creation failed: %s", parser.prog, e)
        return ExitCode.CLANG_FAIL

    clang_args = build_clang_args(
        args.defines,
        args.include_dirs,
        system_include=not args.no_system_include
    )

    report = ScanReport()
    queue = ModificationQueue()
    sink: FindingSink = InteractiveCollector(queue) if args.interactive else WarningReporter(report)
    classifier = VoidClassifier(sink, report)

    try:
        ret = process_files(index, args.files, clang_args, classifier)
    except UserQuit:
        # exit without pomp; nothing queued so far gets applied
        print("Okay, exiting.")
        return ExitCode.OK
    except MemoryError:
        logger.error("%s: out of memory", parser.prog)
        return ExitCode.MEMORY

    if args.interactive:
        modifications = queue.drain()
        if modifications:
            engine = PatchEngine(settings.backup_suffix, settings.staging_dir)
            result = engine.apply(modifications)
            if not result.ok:
                logger.error("Could not patch: %s", ", ".join(result.failed))

    if ret == ExitCode.OK and args.extended_status and report.suggested:
        ret = ExitCode.EXT_SUGGEST

    return ret


def run():
    """Console script entry point"""
    sys.exit(int(main()))


if __name__ == "__main__":
    run()
