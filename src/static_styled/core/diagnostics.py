"""
Diagnostics model and emitter.

Diagnostics are structured issues delivered fire-and-forget to an external
sink in traversal order. The emitter suppresses exact duplicates, which
otherwise appear when the coordinator re-runs a rewrite pass over the same
tree.
"""

from typing import TYPE_CHECKING, Callable, List, Optional, Set, Tuple

import libcst as cst
from pydantic import BaseModel, Field

from static_styled.enums import Severity

if TYPE_CHECKING:
  from static_styled.core.evaluator import RequiresRuntimeResult
  from static_styled.core.program import SourceProgram


class InnerDiagnostic(BaseModel):
  """
  Originating location of a failed constant fold.
  """

  file: str = Field(description="Path of the file containing the origin node.")
  line: int = Field(description="1-based line of the origin node.")
  message: str = Field(description="Why the value requires runtime evaluation.")
  source: str = Field(description="Source text of the origin node.")
  severity: Optional[Severity] = Field(None, description="Severity inherited from the outer diagnostic.")


class Diagnostic(BaseModel):
  """
  A single issue reported by the transform.
  """

  message: str
  severity: Severity
  file: str
  line: int
  source: str
  column: int = 0
  inner_diagnostic: Optional[InnerDiagnostic] = None

  def key(self) -> Tuple[str, str, str, int, int, str]:
    """
    Identity used to suppress duplicates across passes.

    Returns:
        Tuple: (message, severity, file, line, column, source).
    """
    inner = self.inner_diagnostic.message if self.inner_diagnostic else ""
    return (self.message + inner, self.severity.value, self.file, self.line, self.column, self.source)


DiagnosticsReporter = Callable[[Diagnostic], object]


class DiagnosticsEmitter:
  """
  Fans diagnostics out to an optional reporter and keeps an ordered log.
  """

  def __init__(self, reporter: Optional[DiagnosticsReporter] = None) -> None:
    """
    Initializes the emitter.

    Args:
        reporter: External sink receiving each distinct diagnostic.
    """
    self._reporter = reporter
    self._seen: Set[Tuple[str, str, str, int, int, str]] = set()
    self.emitted: List[Diagnostic] = []

  def emit(self, diagnostic: Diagnostic) -> bool:
    """
    Delivers a diagnostic unless an identical one was already delivered.

    Args:
        diagnostic: The issue to report.

    Returns:
        bool: True if the diagnostic was delivered.
    """
    key = diagnostic.key()
    if key in self._seen:
      return False
    self._seen.add(key)
    self.emitted.append(diagnostic)
    if self._reporter:
      self._reporter(diagnostic)
    return True

  @property
  def has_errors(self) -> bool:
    """
    Returns True if any error-severity diagnostic was delivered.
    """
    return any(d.severity == Severity.ERROR for d in self.emitted)


def build_diagnostic(
  program: "SourceProgram",
  node: cst.CSTNode,
  message: str,
  severity: Severity,
  requires_runtime: Optional["RequiresRuntimeResult"] = None,
) -> Diagnostic:
  """
  Creates a diagnostic located at a node of a program.

  Args:
      program: The program containing the node.
      node: The reported node (usually a statement or markup call).
      message: Human readable description.
      severity: Graded severity.
      requires_runtime: Optional evaluator failure attached as inner diagnostic.

  Returns:
      Diagnostic: The populated model.
  """
  inner = None
  if requires_runtime is not None:
    inner = requires_runtime.get_diagnostics().model_copy(update={"severity": severity})
  return Diagnostic(
    message=message,
    severity=severity,
    file=program.filename,
    line=program.line_of(node),
    column=program.column_of(node),
    source=program.source_of(node),
    inner_diagnostic=inner,
  )
