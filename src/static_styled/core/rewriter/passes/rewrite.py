"""
Rewrite Pass.

Runs over the collection pass tree and emits the transformed file. Each
run has two stages over the same program:

1.  **Planning** (`UsagePlanner`): decides every markup rewrite, keeps
    tracking escapes and compositions, and marks bindings whose
    declarations must survive. Pending escape diagnostics are then reported.
2.  **Applying** (`RewriteApplier`): replaces planned calls and removes the
    declarations of components no surviving code refers to.

The coordinator may run this pass a second time from the same input tree.
"""

from typing import Dict, Set, Union

import libcst as cst

from static_styled.analysis.declarations import DeclarationAnalyzer
from static_styled.analysis.safety import SafetyAnalyzer
from static_styled.core.program import BindingId, SourceProgram
from static_styled.core.rewriter.context import ExtractionContext
from static_styled.core.rewriter.interface import RewriterPass
from static_styled.core.rewriter.passes.exemptions import ExemptionTracker
from static_styled.core.rewriter.usages import RewritePlan, UsageRewriter


class RewritePass(RewriterPass):
  """
  Pass rewriting markup usages and dropping inlined declarations.
  """

  def transform(self, module: cst.Module, context: ExtractionContext) -> cst.Module:
    """
    Plans and applies the rewrite.

    Args:
        module: The collection pass CST.
        context: Shared state.

    Returns:
        The transformed CST.
    """
    program = SourceProgram(module, context.filename)
    planner = UsagePlanner(program, context)
    program.module.visit(planner)
    planner.safety.report_escapes()

    context.rewrites = []
    applier = RewriteApplier(program, context, planner)
    return program.module.visit(applier)


class UsagePlanner(cst.CSTVisitor):
  """
  LibCST Visitor collecting rewrite decisions.
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
    self.usages = UsageRewriter(program, context, self.safety)
    self.exemptions = ExemptionTracker(context.directives)

    self.plans: Dict[cst.Call, RewritePlan] = {}
    self.declaration_bindings: Dict[cst.SimpleStatementLine, BindingId] = {}

  def on_visit(self, node: cst.CSTNode) -> bool:
    self.exemptions.enter(node)
    return super().on_visit(node)

  def on_leave(self, original_node: cst.CSTNode) -> None:
    super().on_leave(original_node)
    self.exemptions.leave(original_node)

  def visit_SimpleStatementLine(self, node: cst.SimpleStatementLine) -> None:
    matched = self.declarations.match(node)
    if matched is not None and self.context.registry.is_registered(matched[2]):
      self.declaration_bindings[node] = matched[2]

  def visit_Call(self, node: cst.Call) -> None:
    self.safety.inspect_composition(node)
    if self.exemptions.active:
      return
    plan = self.usages.plan(node)
    if plan is not None:
      self.plans[node] = plan

  def visit_Name(self, node: cst.Name) -> None:
    self.safety.inspect_reference(node, exempt=self.exemptions.active)

  def droppable_declarations(self) -> Set[cst.SimpleStatementLine]:
    """
    Returns declaration statements that can be removed from the output.
    """
    registry = self.context.registry
    return {stmt for stmt, binding in self.declaration_bindings.items() if registry.is_droppable(binding)}


class RewriteApplier(cst.CSTTransformer):
  """
  LibCST Transformer executing the planner's decisions.
  """

  def __init__(self, program: SourceProgram, context: ExtractionContext, planner: UsagePlanner) -> None:
    """
    Initialize.

    Args:
        program: Semantic view of the tree being transformed.
        context: The execution context.
        planner: The completed planning visitor over the same program.
    """
    self.program = program
    self.context = context
    self.planner = planner
    self._drops = planner.droppable_declarations()

  def leave_Call(self, original_node: cst.Call, updated_node: cst.Call) -> cst.BaseExpression:
    plan = self.planner.plans.get(original_node)
    if plan is None:
      return updated_node
    if self.context.registry.is_escaped(plan.binding):
      self.context.tracer.log_inspection(plan.original, "skipped", "component escapes markup")
      return updated_node
    return self.planner.usages.apply(plan, updated_node)

  def leave_SimpleStatementLine(
    self, original_node: cst.SimpleStatementLine, updated_node: cst.SimpleStatementLine
  ) -> Union[cst.BaseStatement, cst.RemovalSentinel]:
    if original_node not in self._drops:
      return updated_node
    self.context.tracer.log_mutation("Declaration", self.program.source_of(original_node), "(removed)")
    return cst.RemoveFromParent()
