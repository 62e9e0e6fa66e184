"""
Data structures representing the output of the extraction engine.

`ExtractionResult` encapsulates the generated code, fatal errors, the
diagnostics emitted by the transform, provenance records of every rewritten
markup node and the execution trace.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from static_styled.core.diagnostics import Diagnostic
from static_styled.enums import Severity


class RewriteRecord(BaseModel):
  """
  Provenance linkage between an original markup node and its replacement.
  """

  file: str = Field(description="Path of the rewritten file.")
  line: int = Field(description="1-based line of the original node.")
  original: str = Field(description="Source text of the original markup node.")
  replacement: str = Field(description="Source text of the emitted element.")
  class_name: str = Field(description="Class name returned by the style engine.")


class ExtractionResult(BaseModel):
  """
  Container for the results of a single file extraction.
  """

  code: str = Field(default="", description="The transformed source code.")
  errors: List[str] = Field(default_factory=list, description="Fatal errors (e.g. parse failures).")
  success: bool = Field(
    default=True,
    description="True if the file was parsed and processed.",
  )
  diagnostics: List[Diagnostic] = Field(default_factory=list, description="Issues reported by the transform.")
  rewrites: List[RewriteRecord] = Field(default_factory=list, description="Provenance of rewritten nodes.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Execution trace log data.")
  passes_run: int = Field(default=0, description="Number of tree traversals performed.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the run failed or reported an error-severity diagnostic.

    Returns:
        True if the file failed to process or an error diagnostic was emitted.
    """
    return len(self.errors) > 0 or any(d.severity == Severity.ERROR for d in self.diagnostics)
