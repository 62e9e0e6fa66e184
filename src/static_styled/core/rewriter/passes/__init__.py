"""
Traversal Passes Package.
"""

from static_styled.core.rewriter.passes.collection import CollectionPass, CollectionVisitor
from static_styled.core.rewriter.passes.rewrite import RewriteApplier, RewritePass, UsagePlanner

__all__ = [
  "CollectionPass",
  "CollectionVisitor",
  "RewritePass",
  "UsagePlanner",
  "RewriteApplier",
]
