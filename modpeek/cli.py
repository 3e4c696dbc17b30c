# modpeek/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from modpeek.api import PeekReport, peekMod
from modpeek.core.logging import configureLogging
from modpeek.core.settings import settings, settingsBool
from modpeek.report import formatError, formatIdAndVersion, formatModInfoLines

logger = logging.getLogger(__name__)

__all__ = ["EXIT_OK", "EXIT_FAILURE", "buildParser", "exitCodeFor", "main"]



EXIT_OK = 0
EXIT_FAILURE = 1



class _ArgumentParser(argparse.ArgumentParser):
    """Reports usage errors with the same exit status as a failed peek."""

    def error(self, message: str):  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")



def buildParser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="modpeek",
        description="Print the manifest of a Vintage Story mod (.zip, .cs or .dll) and report every problem with it.",
        epilog="Settings are read from $MODPEEK_SETTINGS or ~/.modpeek/modpeek.json5.",
    )
    parser.add_argument(
        "-i", "--idandversion",
        action="store_true",
        help="only print 'ModID:Version'",
    )
    parser.add_argument(
        "-p", "--always-print",
        action="store_true",
        dest="alwaysPrint",
        help="print the result even when problems were found; warnings alone no longer fail the run",
    )
    parser.add_argument("-f", "--file", metavar="PATH", help="the mod file to read")
    parser.add_argument("path", nargs="?", metavar="PATH", help="the mod file to read")
    return parser



def _inputPath(parser: argparse.ArgumentParser, args: argparse.Namespace) -> Path:
    if args.file and args.path:
        parser.error("give the mod file either with -f/--file or as an argument, not both")
    raw = args.file or args.path
    if not raw:
        parser.error("missing mod file")
    return Path(raw)



def exitCodeFor(report: PeekReport, alwaysPrint: bool) -> int:
    if report.hasFatal:
        return EXIT_FAILURE
    if report.hasWarnings and not alwaysPrint:
        return EXIT_FAILURE
    return EXIT_OK



def main(argv: Sequence[str] | None = None) -> int:
    parser = buildParser()
    args = parser.parse_args(argv)
    configureLogging(settings("logging.level", "WARNING"), settings("logging.format", "dev"))

    path = _inputPath(parser, args)
    try:
        data = path.read_bytes()
    except OSError as err:
        parser.error(f"can't read '{path}': {err.strerror or err}")

    logger.debug("Read %d bytes from '%s'", len(data), path)
    report = peekMod(data, path.name)

    for error in report.errors:
        print(formatError(error), file=sys.stderr)

    alwaysPrint = args.alwaysPrint or settingsBool("output.alwaysPrint", False)
    if report.modInfo is not None and (report.ok or alwaysPrint):
        if args.idandversion:
            print(formatIdAndVersion(report.modInfo))
        else:
            for line in formatModInfoLines(report.modInfo):
                print(line)

    return exitCodeFor(report, alwaysPrint)



if __name__ == "__main__":
    sys.exit(main())
