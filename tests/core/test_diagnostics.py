"""
Tests for Diagnostics Emission.
"""

from unittest.mock import MagicMock

import libcst as cst

from static_styled.core.diagnostics import Diagnostic, DiagnosticsEmitter, build_diagnostic
from static_styled.core.evaluator import requires_runtime_result
from static_styled.core.program import SourceProgram
from static_styled.enums import Severity


def _diag(message: str = "msg", severity: Severity = Severity.INFO, line: int = 1) -> Diagnostic:
  return Diagnostic(message=message, severity=severity, file="view.py", line=line, source="Box()")


def test_emitter_forwards_to_reporter() -> None:
  reporter = MagicMock()
  emitter = DiagnosticsEmitter(reporter)
  diagnostic = _diag()

  assert emitter.emit(diagnostic) is True
  reporter.assert_called_once_with(diagnostic)
  assert emitter.emitted == [diagnostic]


def test_emitter_suppresses_duplicates() -> None:
  """Verify identical diagnostics from repeated passes are delivered once."""
  reporter = MagicMock()
  emitter = DiagnosticsEmitter(reporter)

  assert emitter.emit(_diag()) is True
  assert emitter.emit(_diag()) is False
  assert emitter.emit(_diag(line=2)) is True
  assert emitter.emit(_diag(line=2).model_copy(update={"column": 6})) is True
  assert reporter.call_count == 3
  assert len(emitter.emitted) == 3


def test_has_errors() -> None:
  emitter = DiagnosticsEmitter()
  emitter.emit(_diag(severity=Severity.WARNING))
  assert not emitter.has_errors
  emitter.emit(_diag(severity=Severity.ERROR))
  assert emitter.has_errors


def test_build_diagnostic_with_inner() -> None:
  """Verify the inner diagnostic keeps the origin and takes the outer severity."""
  program = SourceProgram(cst.parse_module("Box = styled.div({\n    'color': fn,\n})\n"), filename="view.py")
  stmt = program.module.body[0]
  value_node = stmt.body[0].value.args[0].value.elements[0].value
  failure = requires_runtime_result("'fn' cannot be resolved statically", value_node, program)

  diagnostic = build_diagnostic(program, stmt, "Styled component could not be statically evaluated", Severity.ERROR, failure)

  assert diagnostic.file == "view.py"
  assert diagnostic.line == 1
  assert diagnostic.source.startswith("Box = styled.div(")
  assert diagnostic.inner_diagnostic.line == 2
  assert diagnostic.inner_diagnostic.source == "fn"
  assert diagnostic.inner_diagnostic.severity == Severity.ERROR
