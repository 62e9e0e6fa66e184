"""
Usage Rewriter.

Replaces eligible markup calls with plain elements carrying a precomputed
class name::

    Box(title, css={"fontSize": 12}, id="x")
    # becomes
    html.div(title, id="x", className="a b")

Eligible callees are the primitive's capitalized members (``styled.Div``)
and registered components that are neither escaped nor caught by the
composed top-level guard. The decision (`plan`) is separated from the tree
edit (`apply`) so the rewrite pass can decide declaration removal with
every usage outcome known.
"""

import keyword
from dataclasses import dataclass
from typing import Optional, Tuple

import libcst as cst

from static_styled.analysis.declarations import fold_style
from static_styled.analysis.safety import SafetyAnalyzer
from static_styled.core.diagnostics import build_diagnostic
from static_styled.core.evaluator import EvaluatedStyle, is_requires_runtime_result
from static_styled.core.program import BindingId, SourceProgram
from static_styled.core.result import RewriteRecord
from static_styled.core.rewriter.context import ExtractionContext
from static_styled.enums import Severity


@dataclass(frozen=True)
class RewritePlan:
  """
  Decision to rewrite one markup call.
  """

  element_name: str
  class_name: str
  binding: Optional[BindingId]
  line: int
  original: str


def _quote(text: str) -> str:
  return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class UsageRewriter:
  """
  Plans and applies markup usage rewrites over one program.
  """

  def __init__(self, program: SourceProgram, ctx: ExtractionContext, safety: SafetyAnalyzer) -> None:
    """
    Args:
        program: Semantic view of the rewrite pass tree.
        ctx: Shared extraction state.
        safety: Analyzer providing the composed top-level guard.
    """
    self.program = program
    self.ctx = ctx
    self.config = ctx.config
    self.safety = safety

  def _find_keyword(self, call: cst.Call, name: str) -> Optional[cst.Arg]:
    for arg in call.args:
      if arg.keyword is not None and arg.keyword.value == name:
        return arg
    return None

  def _resolve_target(self, call: cst.Call) -> Optional[Tuple[str, Tuple[EvaluatedStyle, ...], Optional[BindingId]]]:
    """Returns (element, base styles, binding) for an eligible callee."""
    func = call.func
    if isinstance(func, cst.Attribute) and self.safety.is_primitive(func.value):
      tag = func.attr.value
      if not tag[:1].isupper() or self._find_keyword(call, self.config.css_attribute) is None:
        return None
      return tag.lower(), (), None

    if isinstance(func, cst.Name):
      binding = self.program.resolve_binding(func)
      component = self.ctx.registry.get(binding)
      if component is None or self.ctx.registry.is_escaped(binding):
        return None
      return component.element_name, component.styles, binding
    return None

  def plan(self, call: cst.Call) -> Optional[RewritePlan]:
    """
    Decides whether a markup call is rewritten.

    Failed rewrites of registered components keep their declaration alive.

    Args:
        call: A call node of the program.

    Returns:
        Optional[RewritePlan]: The decision, or None to leave the call untouched.
    """
    target = self._resolve_target(call)
    if target is None:
      return None
    element_name, styles, binding = target

    component = self.ctx.registry.get(binding)
    require_static = self.ctx.all_static or (component is not None and component.require_static)

    if self.safety.is_top_level_in_extended_component(call):
      self.ctx.emit(self.safety.guard_diagnostic(call))
      self.ctx.registry.retain(binding)
      return None

    if not element_name.isidentifier() or keyword.iskeyword(element_name):
      self.ctx.tracer.log_inspection(element_name, "skipped", "element name is not an identifier")
      self.ctx.registry.retain(binding)
      return None

    stack = list(styles)
    css_arg = self._find_keyword(call, self.config.css_attribute)
    if css_arg is not None:
      inline = fold_style(css_arg.value, self.program, self.ctx, call)
      if is_requires_runtime_result(inline):
        if require_static:
          message = f"Component marked with {self.config.directive_tag('static')} could not be statically evaluated"
        else:
          message = f"{self.config.css_attribute} attribute could not be statically evaluated"
        severity = Severity.ERROR if require_static else Severity.INFO
        self.ctx.emit(build_diagnostic(self.program, call, message, severity, inline))
        self.ctx.registry.retain(binding)
        return None
      stack.append(inline)

    existing = ""
    class_arg = self._find_keyword(call, self.config.class_attribute)
    if class_arg is not None:
      value = class_arg.value
      text = value.evaluated_value if isinstance(value, cst.SimpleString) else None
      if not isinstance(text, str):
        self.ctx.emit(
          build_diagnostic(
            self.program,
            call,
            f"Existing {self.config.class_attribute} could not be merged with extracted styles",
            Severity.ERROR if require_static else Severity.WARNING,
          )
        )
        self.ctx.registry.retain(binding)
        return None
      existing = text.strip()

    class_name = self.ctx.style_engine.inject_style(stack)
    return RewritePlan(
      element_name=element_name,
      class_name=" ".join(part for part in (existing, class_name) if part),
      binding=binding,
      line=self.program.line_of(call),
      original=self.program.source_of(call),
    )

  def apply(self, plan: RewritePlan, updated: cst.Call) -> cst.Call:
    """
    Builds the replacement element for a planned call.

    The reserved ``css`` keyword and any existing class keyword are removed,
    every other argument is kept in order and the class keyword is appended.

    Args:
        plan: The rewrite decision.
        updated: The call with already rewritten children.

    Returns:
        cst.Call: The plain element call.
    """
    removed = {self.config.css_attribute, self.config.class_attribute}
    args = [a for a in updated.args if a.keyword is None or a.keyword.value not in removed]
    if args and args[-1].comma is not cst.MaybeSentinel.DEFAULT:
      args[-1] = args[-1].with_changes(comma=cst.MaybeSentinel.DEFAULT)

    args.append(
      cst.Arg(
        value=cst.SimpleString(_quote(plan.class_name)),
        keyword=cst.Name(self.config.class_attribute),
        equal=cst.AssignEqual(
          whitespace_before=cst.SimpleWhitespace(""),
          whitespace_after=cst.SimpleWhitespace(""),
        ),
      )
    )

    replacement = updated.with_changes(
      func=cst.Attribute(value=cst.Name(self.config.element_namespace), attr=cst.Name(plan.element_name)),
      args=args,
    )

    replacement_source = cst.Module(body=[]).code_for_node(replacement)
    self.ctx.rewrites.append(
      RewriteRecord(
        file=self.program.filename,
        line=plan.line,
        original=plan.original,
        replacement=replacement_source,
        class_name=plan.class_name,
      )
    )
    self.ctx.tracer.log_mutation("Markup", plan.original, replacement_source)
    return replacement
