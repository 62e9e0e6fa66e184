"""
Tracking of ``dynamic`` directive subtrees during traversal.
"""

from typing import List

import libcst as cst

from static_styled.core.directives import DirectiveIndex


class ExemptionTracker:
  """
  Stack of statements carrying the ``dynamic`` directive around the cursor.
  """

  def __init__(self, directives: DirectiveIndex) -> None:
    self._directives = directives
    self._stack: List[cst.CSTNode] = []

  def enter(self, node: cst.CSTNode) -> None:
    if isinstance(node, cst.BaseStatement) and self._directives.is_dynamic(node):
      self._stack.append(node)

  def leave(self, node: cst.CSTNode) -> None:
    if self._stack and self._stack[-1] is node:
      self._stack.pop()

  @property
  def active(self) -> bool:
    """True while the cursor is inside an exempt subtree."""
    return bool(self._stack)
