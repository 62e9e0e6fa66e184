"""
Extraction Context Module.

Provides `ExtractionContext`, the shared state of one file's extraction run.
It decouples state (registry, directives, collaborators) from the passes that
read and mutate it, so every pass of the coordinator operates on a
consistent view.
"""

from typing import List, Optional

import libcst as cst

from static_styled.analysis.registry import SymbolRegistry
from static_styled.config import RuntimeConfig
from static_styled.core.diagnostics import Diagnostic, DiagnosticsEmitter
from static_styled.core.directives import DirectiveIndex
from static_styled.core.result import RewriteRecord
from static_styled.core.tracer import TraceLogger
from static_styled.enums import PassPhase
from static_styled.style.base import StyleEngine


class ExtractionContext:
  """
  Shared state container for the passes of one file.
  """

  def __init__(
    self,
    module: cst.Module,
    config: RuntimeConfig,
    style_engine: StyleEngine,
    emitter: Optional[DiagnosticsEmitter] = None,
    tracer: Optional[TraceLogger] = None,
    filename: str = "<string>",
  ) -> None:
    """
    Initializes the context.

    Args:
        module: The parsed file, used to resolve file-level directives.
        config: The runtime configuration for the run.
        style_engine: Collaborator turning style stacks into class names.
        emitter: Diagnostics sink. A silent emitter is created if omitted.
        tracer: Trace recorder. A private one is created if omitted.
        filename: Path reported in diagnostics.
    """
    self.config = config
    self.style_engine = style_engine
    self.emitter = emitter or DiagnosticsEmitter()
    self.tracer = tracer or TraceLogger()
    self.filename = filename

    self.directives = DirectiveIndex(module, config)
    self.registry = SymbolRegistry()
    self.phase = PassPhase.COLLECT
    self.passes_run = 0

    # Provenance of the latest rewrite pass (replaced when a pass re-runs)
    self.rewrites: List[RewriteRecord] = []

  @property
  def all_static(self) -> bool:
    """True if every fallback in the file must be reported as an error."""
    return self.directives.file_all_static

  def emit(self, diagnostic: Diagnostic) -> bool:
    """
    Forwards a diagnostic to the emitter.

    Returns:
        bool: True if the diagnostic was not a duplicate.
    """
    return self.emitter.emit(diagnostic)
