"""
Orchestration logic for the extraction passes.

The ``PassCoordinator`` is a small state machine over a shared context::

    COLLECT -> REWRITE -> [REWRITE_AGAIN] -> DONE

*   A file-level ``all-dynamic`` directive skips the transform entirely.
*   ``REWRITE_AGAIN`` runs at most once, only when components escaping markup
    are known after ``REWRITE``. It starts again from the collection tree so
    usages rewritten before an escape was discovered are reconsidered.
"""

from typing import Optional

import libcst as cst

from static_styled.core.rewriter.context import ExtractionContext
from static_styled.core.rewriter.interface import RewriterPass
from static_styled.core.rewriter.passes import CollectionPass, RewritePass
from static_styled.enums import PassPhase


class PassCoordinator:
  """
  Sequences the collection and rewrite passes for one file.
  """

  def __init__(self, collect: Optional[RewriterPass] = None, rewrite: Optional[RewriterPass] = None) -> None:
    """
    Initializes the coordinator.

    Args:
        collect: The read-only first pass. Defaults to `CollectionPass`.
        rewrite: The rewriting pass. Defaults to `RewritePass`.
    """
    self.collect = collect or CollectionPass()
    self.rewrite = rewrite or RewritePass()

  def _run_pass(
    self, phase: PassPhase, pass_instance: RewriterPass, module: cst.Module, context: ExtractionContext
  ) -> cst.Module:
    context.phase = phase
    context.tracer.start_phase(f"Pass: {phase.value}", type(pass_instance).__name__)
    result = pass_instance.transform(module, context)
    context.passes_run += 1
    context.tracer.end_phase()
    return result

  def run(self, module: cst.Module, context: ExtractionContext) -> cst.Module:
    """
    Executes the passes over a module.

    Args:
        module: The parsed source.
        context: Fresh per-file state.

    Returns:
        The transformed module (the input itself when the file opts out).
    """
    if context.directives.file_all_dynamic:
      context.tracer.log_inspection(context.filename, "skipped", "file opts out of extraction")
      context.phase = PassPhase.DONE
      return module

    first_pass = self._run_pass(PassPhase.COLLECT, self.collect, module, context)
    result = self._run_pass(PassPhase.REWRITE, self.rewrite, first_pass, context)

    if context.registry.symbols_with_references_outside_markup:
      result = self._run_pass(PassPhase.REWRITE_AGAIN, self.rewrite, first_pass, context)

    context.phase = PassPhase.DONE
    return result
