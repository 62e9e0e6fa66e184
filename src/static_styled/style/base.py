"""
Interface definition for Style Engines.

The extraction passes only ever need one operation from the style layer:
turning an ordered style stack into a class name.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence


class StyleEngine(ABC):
  """
  Abstract contract for the style-injection collaborator.

  Implementations must be safe under repeated identical calls, since the
  rewriter never deduplicates requests across passes.
  """

  @abstractmethod
  def inject_style(self, stack: Sequence[Dict[str, Any]]) -> str:
    """
    Registers the styles of a stack and returns the matching class names.

    Later entries of the stack take precedence over earlier ones.

    Args:
        stack: Ordered style mappings, base styles first.

    Returns:
        A space-separated class name string.
    """
    pass
