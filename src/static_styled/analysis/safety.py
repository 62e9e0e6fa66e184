"""
Safety Analyzer.

Decides whether markup usages of a registered component may be rewritten.
Two conditions make rewriting unsafe:

1.  **Composed top-level guard**: the usage is the direct return value (or
    lambda body) of a named component that is itself extended through
    ``styled(Component, {...})``. The composition must observe the real
    element at runtime.
2.  **Outside-markup escape**: the component is referenced as a plain value
    (stored, passed to a call, returned). Every markup usage of such a
    component is left untouched and each reference site is reported once.

References are classified by their syntactic position; see `ReferenceKind`.
"""

from typing import Optional

import libcst as cst

from static_styled.analysis.registry import ReferenceSite
from static_styled.core.diagnostics import Diagnostic
from static_styled.core.program import BindingId, SourceProgram
from static_styled.core.rewriter.context import ExtractionContext
from static_styled.enums import PassPhase, ReferenceKind, Severity


class SafetyAnalyzer:
  """
  Reference classification and usage gating over one program.
  """

  def __init__(self, program: SourceProgram, ctx: ExtractionContext) -> None:
    """
    Args:
        program: Semantic view of the tree being traversed.
        ctx: Shared extraction state.
    """
    self.program = program
    self.ctx = ctx
    self.registry = ctx.registry

  # --- Reference Classification ---

  def classify_reference(self, name: cst.Name) -> Optional[ReferenceKind]:
    """
    Classifies the syntactic role of a name occurrence.

    Args:
        name: A name node of the program.

    Returns:
        Optional[ReferenceKind]: The role, or None for positions that are not
        references (keyword names, attribute members).
    """
    parent = self.program.parent(name)

    if isinstance(parent, cst.AssignTarget) and parent.target is name:
      return ReferenceKind.DECLARATOR
    if isinstance(parent, cst.AnnAssign) and parent.target is name:
      return ReferenceKind.DECLARATOR
    if isinstance(parent, cst.Call) and parent.func is name:
      return ReferenceKind.MARKUP
    if isinstance(parent, cst.Attribute) and parent.attr is name:
      return None
    if isinstance(parent, cst.Arg):
      if parent.keyword is name:
        return None
      call = self.program.parent(parent)
      if (
        parent.value is name
        and not parent.star
        and parent.keyword is None
        and isinstance(call, cst.Call)
        and self.is_primitive(call.func)
        and call.args
        and call.args[0] is parent
      ):
        return ReferenceKind.COMPOSITION
    return ReferenceKind.VALUE

  def is_primitive(self, node: cst.BaseExpression) -> bool:
    return isinstance(node, cst.Name) and node.value == self.ctx.config.primitive_name

  def inspect_reference(self, name: cst.Name, exempt: bool = False) -> Optional[BindingId]:
    """
    Records the effect of a reference to a registered component.

    Value references are escapes. Markup and composition references inside an
    exempt subtree keep the declaration alive since they are never rewritten.

    Args:
        name: The name occurrence.
        exempt: True if the occurrence lies in a ``dynamic`` subtree.

    Returns:
        Optional[BindingId]: The registered binding referenced, if any.
    """
    binding = self.program.resolve_binding(name)
    if not self.registry.is_registered(binding):
      return None

    kind = self.classify_reference(name)
    if kind == ReferenceKind.VALUE:
      self.record_escape(name, binding)
    elif exempt and kind in (ReferenceKind.MARKUP, ReferenceKind.COMPOSITION):
      self.registry.retain(binding)
    return binding

  def record_escape(self, name: cst.Name, binding: BindingId) -> None:
    stmt = self.program.statement_of(name)
    site = ReferenceSite(
      line=self.program.line_of(name),
      column=self.program.column_of(name),
      source=self.program.source_of(stmt),
    )
    if self.registry.record_outside_reference(binding, site):
      self.ctx.tracer.log_inspection(name.value, "escape", f"line {site.line}")

  # --- Compositions ---

  def inspect_composition(self, call: cst.Call) -> None:
    """
    Tracks ``styled(Parent, ...)`` calls.

    During collection the parent is marked as extended. In every pass the
    composing declaration (or None for anonymous compositions) is linked to
    a registered parent.

    Args:
        call: Any call node.
    """
    if not self.is_primitive(call.func) or not call.args:
      return
    first = call.args[0].value
    if not isinstance(first, cst.Name) or call.args[0].keyword is not None or call.args[0].star:
      return

    parent = self.program.resolve_binding(first)
    if parent is None:
      return
    if self.ctx.phase == PassPhase.COLLECT:
      self.registry.mark_extended(parent)
    if self.registry.is_registered(parent):
      self.registry.record_composition(parent, self._declaring_binding(call))

  def _declaring_binding(self, call: cst.Call) -> Optional[BindingId]:
    """Returns the registered declaration whose initializer is exactly the call."""
    parent = self.program.parent(call)
    target: Optional[cst.BaseExpression] = None
    if isinstance(parent, cst.Assign) and len(parent.targets) == 1:
      target = parent.targets[0].target
    elif isinstance(parent, cst.AnnAssign):
      target = parent.target
    if not isinstance(target, cst.Name):
      return None
    binding = self.program.resolve_binding(target)
    return binding if self.registry.is_registered(binding) else None

  # --- Composed Top-Level Guard ---

  def enclosing_component(self, node: cst.CSTNode) -> Optional[BindingId]:
    """
    Finds the nearest named component containing a node.

    Named components are ``def`` statements and lambdas assigned to a single
    name. Anonymous lambdas are walked through.

    Args:
        node: Any node of the program.

    Returns:
        Optional[BindingId]: The component binding, if any.
    """
    current = self.program.parent(node)
    while current is not None and not isinstance(current, cst.Module):
      if isinstance(current, cst.FunctionDef):
        return self.program.resolve_binding(current)
      if isinstance(current, cst.Lambda):
        owner = self.program.parent(current)
        if isinstance(owner, cst.Assign) and len(owner.targets) == 1 and owner.value is current:
          target = owner.targets[0].target
          if isinstance(target, cst.Name):
            return self.program.resolve_binding(target)
        if isinstance(owner, cst.AnnAssign) and owner.value is current and isinstance(owner.target, cst.Name):
          return self.program.resolve_binding(owner.target)
      current = self.program.parent(current)
    return None

  def is_top_level_in_extended_component(self, call: cst.Call) -> bool:
    """
    Checks the composed top-level guard for a markup node.

    Args:
        call: The markup call.

    Returns:
        bool: True if the call is the direct returned expression of a
        component that other components extend.
    """
    parent = self.program.parent(call)
    direct = isinstance(parent, cst.Return) or (isinstance(parent, cst.Lambda) and parent.body is call)
    if not direct:
      return False
    return self.enclosing_component(call) in self.registry.extended_component_symbols

  def guard_diagnostic(self, call: cst.Call) -> Diagnostic:
    """
    Builds the diagnostic reported when the composed top-level guard fires.
    """
    return Diagnostic(
      message=(
        f"{self.ctx.config.primitive_name}.[Element] cannot be statically extracted "
        "inside components that are extended by other components"
      ),
      severity=Severity.ERROR if self.ctx.all_static else Severity.INFO,
      file=self.program.filename,
      line=self.program.line_of(call),
      column=self.program.column_of(call),
      source=self.program.source_of(call),
    )

  # --- Escape Reporting ---

  def report_escapes(self) -> None:
    """
    Emits one diagnostic per reference site of every unreported escape.

    Severity is error when the component demanded static extraction or the
    file is all-static. Records are flagged so later passes stay silent.
    """
    for _, record in self.registry.unreported_escapes():
      component = record.component
      severity = Severity.ERROR if component.require_static or self.ctx.all_static else Severity.INFO
      for site in record.references:
        self.ctx.emit(
          Diagnostic(
            message=(
              f"Component '{component.component_name}' cannot be statically extracted "
              "since it's used outside of markup"
            ),
            severity=severity,
            file=self.program.filename,
            line=site.line,
            column=site.column,
            source=site.source,
          )
        )
      record.has_been_reported = True
