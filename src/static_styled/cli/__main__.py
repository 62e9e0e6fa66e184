"""
Main Entry Point for static-styled CLI.

This module handles argument parsing and dispatches to the command handlers
defined in `static_styled.cli.handlers`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from static_styled import __version__
from static_styled.cli import handlers
from static_styled.config import parse_cli_key_values
from static_styled.utils.console import log_error


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="static-styled: Build-time style extraction")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: EXTRACT ---
  cmd_ext = subparsers.add_parser("extract", help="Extract static styles from a Python file or directory")
  cmd_ext.add_argument("path", type=Path, help="Input source file or directory")
  cmd_ext.add_argument("--out", type=Path, help="Output destination (file or dir)")
  cmd_ext.add_argument("--css-out", type=Path, default=None, help="Write the generated style sheet to this file")
  cmd_ext.add_argument(
    "--all-static",
    action="store_true",
    default=None,
    help="Report every fallback as an error (Overrides config)",
  )
  cmd_ext.add_argument(
    "--json-report",
    type=Path,
    default=None,
    help="Save diagnostics and rewrites per file to a JSON file.",
  )
  cmd_ext.add_argument(
    "--json-trace", type=Path, default=None, help="Dump full execution trace (events, mutations) to a JSON file."
  )
  cmd_ext.add_argument(
    "--config",
    nargs="*",
    help="Configuration overrides in key=value format (e.g. primitive_name=styled class_prefix=x-)",
  )

  args = parser.parse_args(argv)

  if args.command == "extract":
    try:
      overrides = parse_cli_key_values(args.config)
    except ValueError as e:
      log_error(str(e))
      return 1
    return handlers.handle_extract(
      args.path, args.out, args.css_out, args.all_static, overrides, args.json_report, args.json_trace
    )

  return 0


if __name__ == "__main__":
  sys.exit(main())
