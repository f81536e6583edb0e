"""Payroll sheet command line interface.

Works offline on sheet JSON files (the same shape the sheet is stored in):
- Per-row pay figures
- Sheet totals
- CSV export
- Running the HTTP API

Usage:
    payroll-sheet compute --input sheet.json
    payroll-sheet totals --input sheet.json [--raw]
    payroll-sheet export --input sheet.json --output payroll.csv
    payroll-sheet serve
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable

from payroll_sheet.calculators import (
    PayrollSheet,
    compute_rows,
    format_currency,
    sheet_totals,
    to_csv,
)
from payroll_sheet.config import configure_logging
from payroll_sheet.services import SheetFormatError, coerce_sheet_dict

logger = logging.getLogger(__name__)


class SheetCli:
    """Payroll sheet command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="payroll-sheet",
            description="Payroll estimation sheet tools",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            default="WARNING",
            help="Logging level (default: WARNING)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        compute = subparsers.add_parser(
            "compute",
            help="Show computed pay figures for each row",
        )
        self._add_input(compute)
        compute.add_argument(
            "--json",
            action="store_true",
            help="Print computed rows as JSON",
        )

        totals = subparsers.add_parser(
            "totals",
            help="Show sheet totals",
        )
        self._add_input(totals)
        totals.add_argument(
            "--raw",
            action="store_true",
            help="Print unrounded numbers instead of currency",
        )

        export = subparsers.add_parser(
            "export",
            help="Export the sheet as CSV",
        )
        self._add_input(export)
        export.add_argument(
            "--output",
            type=Path,
            help="Output file path (default: stdout)",
        )

        subparsers.add_parser(
            "serve",
            help="Run the HTTP API",
        )

        return parser

    @staticmethod
    def _add_input(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--input",
            type=str,
            required=True,
            help="Sheet JSON file ('-' for stdin)",
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)
        configure_logging(parsed.log_level)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[..., int]] = {
            "compute": self._cmd_compute,
            "totals": self._cmd_totals,
            "export": self._cmd_export,
            "serve": self._cmd_serve,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _load_sheet(self, source: str) -> PayrollSheet | None:
        """Read and coerce a sheet file, reporting problems on stderr."""
        try:
            if source == "-":
                text = sys.stdin.read()
            else:
                text = Path(source).read_text(encoding="utf-8")
            return coerce_sheet_dict(json.loads(text))
        except OSError as e:
            print(f"ERROR: cannot read {source}: {e}", file=sys.stderr)
        except (UnicodeDecodeError, json.JSONDecodeError, SheetFormatError) as e:
            print(f"ERROR: {source} is not a valid sheet: {e}", file=sys.stderr)
        return None

    def _cmd_compute(self, args: argparse.Namespace) -> int:
        """Print computed figures per row."""
        sheet = self._load_sheet(args.input)
        if sheet is None:
            return 1

        rows = compute_rows(sheet.rows)
        if args.json:
            print(json.dumps([row.to_dict() for row in rows], indent=2))
            return 0

        if sheet.company or sheet.period_label:
            print(f"{sheet.company} {sheet.period_label}".strip())
        for row in rows:
            print(f"{row.name or '(unnamed)'}")
            print(f"  Gross:   {format_currency(row.gross_pay)}")
            print(f"  Taxable: {format_currency(row.taxable_income)}")
            print(f"  Taxes:   {format_currency(row.taxes)}")
            print(f"  Net:     {format_currency(row.net_pay)}")
        return 0

    def _cmd_totals(self, args: argparse.Namespace) -> int:
        """Print sheet totals."""
        sheet = self._load_sheet(args.input)
        if sheet is None:
            return 1

        totals = sheet_totals(sheet)
        if args.raw:
            print(json.dumps(totals.to_dict()))
            return 0

        print(f"Employees: {len(sheet.rows)}")
        for label, value in totals.to_dict().items():
            print(f"  {label.capitalize():<8} {format_currency(value)}")
        return 0

    def _cmd_export(self, args: argparse.Namespace) -> int:
        """Write the sheet as CSV."""
        sheet = self._load_sheet(args.input)
        if sheet is None:
            return 1

        content = to_csv(sheet)
        if args.output is None:
            sys.stdout.write(content)
            return 0

        try:
            args.output.write_text(content, encoding="utf-8", newline="")
        except OSError as e:
            print(f"ERROR: cannot write {args.output}: {e}", file=sys.stderr)
            return 1
        logger.info("Exported %d row(s) to %s", len(sheet.rows), args.output)
        return 0

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        """Run the HTTP API."""
        from payroll_sheet.__main__ import main as serve

        serve()
        return 0


def main() -> int:
    """CLI entry point."""
    cli = SheetCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
