"""
Collection Pass.

The first traversal. It leaves the tree untouched and fills the registry:
1.  **Declarations**: folded and registered by the `DeclarationAnalyzer`.
2.  **Compositions**: ``styled(Parent, ...)`` calls mark ``Parent`` as extended.
3.  **Escapes**: value references to components registered so far.
"""

import libcst as cst

from static_styled.analysis.declarations import DeclarationAnalyzer
from static_styled.analysis.safety import SafetyAnalyzer
from static_styled.core.program import SourceProgram
from static_styled.core.rewriter.context import ExtractionContext
from static_styled.core.rewriter.interface import RewriterPass
from static_styled.core.rewriter.passes.exemptions import ExemptionTracker


class CollectionPass(RewriterPass):
  """
  Read-only pass populating the symbol registry.
  """

  def transform(self, module: cst.Module, context: ExtractionContext) -> cst.Module:
    """
    Collects declarations, compositions and escapes.

    Args:
        module: The source CST.
        context: Shared state.

    Returns:
        The input module, unchanged.
    """
    program = SourceProgram(module, context.filename)
    program.module.visit(CollectionVisitor(program, context))
    return module


class CollectionVisitor(cst.CSTVisitor):
  """
  LibCST Visitor driving the analyzers over one program.
  """

  def __init__(self, program: SourceProgram, context: ExtractionContext) -> None:
    """
    Initialize.

    Args:
        program: Semantic view of the visited tree.
        context: The execution context.
    """
    self.program = program
    self.context = context
    self.declarations = DeclarationAnalyzer(program, context)
    self.safety = SafetyAnalyzer(program, context)
    self.exemptions = ExemptionTracker(context.directives)

  def on_visit(self, node: cst.CSTNode) -> bool:
    self.exemptions.enter(node)
    return super().on_visit(node)

  def on_leave(self, original_node: cst.CSTNode) -> None:
    super().on_leave(original_node)
    self.exemptions.leave(original_node)

  def visit_SimpleStatementLine(self, node: cst.SimpleStatementLine) -> None:
    if not self.exemptions.active:
      self.declarations.analyze(node)

  def visit_Call(self, node: cst.Call) -> None:
    self.safety.inspect_composition(node)

  def visit_Name(self, node: cst.Name) -> None:
    self.safety.inspect_reference(node, exempt=self.exemptions.active)
