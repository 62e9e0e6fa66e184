"""
Extract Command Handler.

This module implements the logic for the `static-styled extract` command.
It orchestrates:
1. Configuration loading (TOML + CLI overrides).
2. Style extraction via the Engine, sharing one style engine across files.
3. Diagnostics rendering through the console helpers.
4. Output writing (code, style sheet, JSON report, trace).
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from rich.markup import escape
from rich.table import Table

from static_styled.config import RuntimeConfig
from static_styled.core.engine import ExtractionEngine
from static_styled.core.result import ExtractionResult
from static_styled.enums import Severity
from static_styled.style.engine import AtomicStyleEngine
from static_styled.utils.console import (
  console,
  log_diagnostic,
  log_error,
  log_info,
  log_success,
  log_warning,
)


def handle_extract(
  input_path: Path,
  output_path: Optional[Path],
  css_output_path: Optional[Path],
  all_static: Optional[bool],
  overrides: Dict[str, Any],
  json_report_path: Optional[Path] = None,
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the 'extract' command execution.

  Args:
      input_path: Path to the source file or directory.
      output_path: Where transformed code is saved (required for directories).
      css_output_path: Where the accumulated style sheet is saved.
      all_static: If True, escalates every fallback to an error (Overrides config).
      overrides: Additional configuration fields from ``--config``.
      json_report_path: Optional path to dump per-file diagnostics and rewrites.
      json_trace_path: Optional path to dump the execution trace of a single file.

  Returns:
      int: Exit code (0 for success, 1 if any file failed or reported an error).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = RuntimeConfig.load(
      all_static=all_static,
      overrides=overrides,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  style_engine = AtomicStyleEngine(prefix=config.class_prefix)
  engine = ExtractionEngine(config=config, style_engine=style_engine, reporter=log_diagnostic)
  batch_results: Dict[str, ExtractionResult] = {}

  if input_path.is_file():
    result = _extract_single_file(engine, input_path, output_path, json_trace_path)
    batch_results[input_path.name] = result

  elif input_path.is_dir():
    if not output_path:
      log_error("Directory extraction requires --out destination directory.")
      return 1

    py_files = sorted(input_path.rglob("*.py"))
    if not py_files:
      log_warning(f"No .py files found in {input_path}")
      return 0

    log_info(f"Processing {len(py_files)} files from {input_path}...")

    for src_file in py_files:
      rel_path = src_file.relative_to(input_path)
      batch_trace = (output_path / rel_path).with_suffix(".trace.json") if json_trace_path else None
      result = _extract_single_file(engine, src_file, output_path / rel_path, batch_trace)
      batch_results[str(rel_path)] = result

  if css_output_path:
    css_output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(css_output_path, "wt", encoding="utf-8") as f:
      f.write(style_engine.get_style_sheet())
    log_success(f"Style sheet written to [path]{css_output_path}[/path]")

  if json_report_path:
    _write_json_report(batch_results, json_report_path)

  _print_batch_summary(batch_results)
  return 1 if any(r.has_errors for r in batch_results.values()) else 0


def _extract_single_file(
  engine: ExtractionEngine,
  input_path: Path,
  output_path: Optional[Path],
  json_trace_path: Optional[Path] = None,
) -> ExtractionResult:
  """
  Helper to execute extraction on a single file.

  Args:
      engine: The configured engine.
      input_path: Source file path.
      output_path: Destination file path. Code is printed if None.
      json_trace_path: Path to save trace event logs.

  Returns:
      ExtractionResult: Result object containing status and code.
  """
  try:
    with open(input_path, "rt", encoding="utf-8") as f:
      code = f.read()
    result = engine.run(code, filename=str(input_path))

    if json_trace_path and result.trace_events:
      try:
        json_trace_path.parent.mkdir(parents=True, exist_ok=True)
        with open(json_trace_path, "wt", encoding="utf-8") as f:
          json.dump(result.trace_events, f, indent=2)
        log_info(f"Trace saved to [path]{json_trace_path}[/path]")
      except OSError as e:
        log_error(f"Failed to write trace: {e}")

    if not result.success:
      for error in result.errors:
        log_error(f"{escape(str(input_path))}: {escape(error)}")
      return result

    if output_path:
      output_path.parent.mkdir(parents=True, exist_ok=True)
      with open(output_path, "wt", encoding="utf-8") as f:
        f.write(result.code)
      log_success(
        f"Extracted: [path]{input_path}[/path] -> [path]{output_path}[/path] ({len(result.rewrites)} rewrites)"
      )
    else:
      print(result.code)

    return result
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to extract {input_path}: {e}")
    return ExtractionResult(success=False, errors=[str(e)])


def _write_json_report(results: Dict[str, ExtractionResult], report_path: Path) -> None:
  """
  Saves diagnostics and rewrite provenance for every processed file.

  Args:
      results: Dictionary mapping filenames to extraction results.
      report_path: Destination JSON file.
  """
  payload = {name: res.model_dump(mode="json", exclude={"code", "trace_events"}) for name, res in results.items()}
  try:
    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, "wt", encoding="utf-8") as f:
      json.dump(payload, f, indent=2)
    log_info(f"Report saved to [path]{report_path}[/path]")
  except OSError as e:
    log_error(f"Failed to write report: {e}")


def _print_batch_summary(results: Dict[str, ExtractionResult]) -> None:
  """
  Renders a summary table of extraction results to the console.

  Args:
      results: Dictionary mapping filenames to extraction results.
  """
  total = len(results)
  failures = sum(1 for r in results.values() if r.has_errors)
  successes = total - failures
  rewrites = sum(len(r.rewrites) for r in results.values())

  if failures == 0:
    log_success(f"Batch Complete: {successes}/{total} files processed, {rewrites} usages extracted.")
    return

  table = Table(title="Extraction Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if not res.has_errors:
      continue
    status = "❌ Failed" if not res.success else "⚠️ Errors"
    issues = res.errors + [f"line {d.line}: {d.message}" for d in res.diagnostics if d.severity == Severity.ERROR]
    table.add_row(escape(filename), status, escape("; ".join(issues)) if issues else "Unknown Error")

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {successes} Passed, {failures} with Issues.")
