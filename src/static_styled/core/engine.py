"""
Orchestration Engine for Static Style Extraction.

This module provides the `ExtractionEngine`, the primary driver that turns
one source file into its statically extracted form.

The Engine pipeline consists of:

1.  **Ingestion Phase**: parses the source into a LibCST tree. Files that
    fail to parse are returned untouched with ``success=False``.
2.  **Pass Coordination**: runs the collection pass, the rewrite pass and
    the optional bounded re-run over a fresh per-file `ExtractionContext`.
3.  **Output Generation**: renders the tree and packages diagnostics,
    rewrite provenance and the execution trace into an `ExtractionResult`.

The style engine may be shared across many files (the CLI does so to build
one style sheet); everything else is allocated per run.
"""

from typing import Optional

import libcst as cst

from static_styled.config import RuntimeConfig
from static_styled.core.diagnostics import DiagnosticsEmitter, DiagnosticsReporter
from static_styled.core.result import ExtractionResult
from static_styled.core.rewriter.context import ExtractionContext
from static_styled.core.rewriter.pipeline import PassCoordinator
from static_styled.core.tracer import TraceLogger
from static_styled.style.base import StyleEngine
from static_styled.style.engine import AtomicStyleEngine


class ExtractionEngine:
  """
  The main compilation unit.

  Encapsulates the configuration and collaborators required to extract styles
  from files, one `run` per file.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    style_engine: Optional[StyleEngine] = None,
    reporter: Optional[DiagnosticsReporter] = None,
  ) -> None:
    """
    Initializes the Engine.

    Args:
        config (RuntimeConfig, optional): The runtime configuration. Loaded from
            ``pyproject.toml`` if omitted.
        style_engine (StyleEngine, optional): Collaborator producing class names.
            An `AtomicStyleEngine` using the configured prefix is created if omitted.
        reporter (Callable, optional): External sink receiving each diagnostic.
    """
    self.config = config or RuntimeConfig.load()
    self.style_engine = style_engine or AtomicStyleEngine(prefix=self.config.class_prefix)
    self.reporter = reporter
    self.coordinator = PassCoordinator()

  def parse(self, code: str) -> cst.Module:
    """
    Parses source string into a LibCST Module.

    Args:
        code (str): Python source code.

    Returns:
        cst.Module: The parsed tree.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cst.parse_module(code)

  def run(self, code: str, filename: str = "<string>") -> ExtractionResult:
    """
    Executes the extraction pipeline on one file.

    Args:
        code (str): The input source string.
        filename (str): Path reported in diagnostics.

    Returns:
        ExtractionResult: Transformed code, diagnostics and trace.
    """
    tracer = TraceLogger()
    tracer.start_phase("Extraction Pipeline", filename)

    tracer.start_phase("Preprocessing", "Parsing")
    try:
      tree = self.parse(code)
    except cst.ParserSyntaxError as e:
      tracer.log_warning(f"Parse Error: {e}")
      tracer.end_phase()
      tracer.end_phase()
      return ExtractionResult(
        code=code,
        errors=[f"Parse Error: {e}"],
        success=False,
        trace_events=tracer.export(),
      )
    tracer.end_phase()

    emitter = DiagnosticsEmitter(self.reporter)
    context = ExtractionContext(
      tree,
      self.config,
      self.style_engine,
      emitter=emitter,
      tracer=tracer,
      filename=filename,
    )
    tree = self.coordinator.run(tree, context)
    tracer.end_phase()

    return ExtractionResult(
      code=tree.code,
      diagnostics=list(emitter.emitted),
      rewrites=list(context.rewrites),
      trace_events=tracer.export(),
      passes_run=context.passes_run,
    )
