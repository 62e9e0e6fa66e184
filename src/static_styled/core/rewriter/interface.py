"""
Interface definition for Rewriter Passes.

This module defines the abstract base class that all traversal passes must
implement to be driven by the ``PassCoordinator``.
"""

from abc import ABC, abstractmethod

import libcst as cst

from static_styled.core.rewriter.context import ExtractionContext


class RewriterPass(ABC):
  """
  Abstract contract for a traversal in the extraction pipeline.
  """

  @abstractmethod
  def transform(self, module: cst.Module, context: ExtractionContext) -> cst.Module:
    """
    Executes the pass on the given CST module.

    Args:
        module: The input LibCST module.
        context: The shared extraction context.

    Returns:
        The resulting LibCST module (the input itself for read-only passes).
    """
    pass
