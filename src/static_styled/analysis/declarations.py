"""
Declaration Analyzer.

Recognizes statements declaring a styled component and folds their style
descriptors into the `SymbolRegistry`. Three declaration forms are
understood, tried in order and mutually exclusive:

1.  **Direct**: ``Box = styled.div({...})``.
2.  **Extension**: ``Fancy = styled(Box, {...})``. ``Box`` must already be
    registered, so declaration order within the file matters.
3.  **Factory**: ``Card = make_card("red")``. Only Pascal-case names are
    considered; the initializer is folded generically and must produce a
    static component.

A descriptor containing a function at any depth cannot be extracted; the
reported location prefers the function node.
"""

from typing import Any, Optional, Tuple, Union

import libcst as cst

from static_styled.analysis.registry import StaticStyledComponent
from static_styled.core.diagnostics import build_diagnostic
from static_styled.core.evaluator import (
  EvaluatedStyle,
  FunctionValue,
  RequiresRuntimeResult,
  StaticComponent,
  StaticElement,
  evaluate,
  is_requires_runtime_result,
  requires_runtime_result,
)
from static_styled.core.program import BindingId, SourceProgram
from static_styled.core.rewriter.context import ExtractionContext
from static_styled.enums import Severity


def find_function_leaf(value: Any) -> Optional[FunctionValue]:
  """
  Searches a folded style for a function-typed leaf.

  Args:
      value: A folded mapping, list or primitive.

  Returns:
      Optional[FunctionValue]: The first function found depth-first.
  """
  if isinstance(value, FunctionValue):
    return value
  if isinstance(value, dict):
    children = list(value.values())
  elif isinstance(value, (list, tuple)):
    children = list(value)
  else:
    return None

  for child in children:
    found = find_function_leaf(child)
    if found is not None:
      return found
  return None


def has_non_string_key(value: Any) -> bool:
  """
  Searches a folded style for a mapping key that is not a string.

  Args:
      value: A folded mapping, list or primitive.

  Returns:
      bool: True if any mapping at any depth has a non-string key.
  """
  if isinstance(value, dict):
    return any(not isinstance(key, str) or has_non_string_key(child) for key, child in value.items())
  if isinstance(value, (list, tuple)):
    return any(has_non_string_key(child) for child in value)
  return False


def is_evaluable_style(value: Any) -> bool:
  """
  Checks that a fold produced a string-keyed mapping free of function leaves.
  """
  return isinstance(value, dict) and find_function_leaf(value) is None and not has_non_string_key(value)


def fold_style(
  node: cst.BaseExpression,
  program: SourceProgram,
  ctx: ExtractionContext,
  fallback: cst.CSTNode,
) -> Union[EvaluatedStyle, RequiresRuntimeResult]:
  """
  Folds a style descriptor.

  Args:
      node: The descriptor expression.
      program: The program containing the node.
      ctx: Provides evaluator configuration.
      fallback: Node reported when a function leaf has no location of its own.

  Returns:
      The folded style, or a `RequiresRuntimeResult` explaining the failure.
  """
  style = evaluate(
    node,
    program,
    primitive_name=ctx.config.primitive_name,
    max_depth=ctx.config.max_evaluation_depth,
  )
  if is_requires_runtime_result(style):
    return style
  if not isinstance(style, dict):
    return requires_runtime_result("Style descriptor must evaluate to a mapping", node, program)
  return _check_style(style, program, fallback)


def _check_style(
  style: EvaluatedStyle, program: SourceProgram, fallback: cst.CSTNode
) -> Union[EvaluatedStyle, RequiresRuntimeResult]:
  leaf = find_function_leaf(style)
  if leaf is not None:
    location = leaf.node if program.line_of(leaf.node) else fallback
    return requires_runtime_result("Functions in style objects require runtime", location, program)
  if has_non_string_key(style):
    return requires_runtime_result("Style keys must be strings", fallback, program)
  return style


class DeclarationAnalyzer:
  """
  Folds declaration statements into registered components.
  """

  def __init__(self, program: SourceProgram, ctx: ExtractionContext) -> None:
    """
    Args:
        program: Semantic view of the collection pass tree.
        ctx: Shared extraction state.
    """
    self.program = program
    self.ctx = ctx
    self.config = ctx.config

  def match(self, stmt: cst.SimpleStatementLine) -> Optional[Tuple[cst.Name, cst.BaseExpression, BindingId]]:
    """
    Recognizes a single-name declaration eligible for registration.

    Exported names (``__all__``), rebound names and lines holding more than
    one statement are not eligible.

    Args:
        stmt: The statement line.

    Returns:
        Optional[Tuple]: (target name, initializer, binding) or None.
    """
    if len(stmt.body) != 1:
      return None

    small = stmt.body[0]
    if isinstance(small, cst.Assign) and len(small.targets) == 1:
      target, value = small.targets[0].target, small.value
    elif isinstance(small, cst.AnnAssign) and small.value is not None:
      target, value = small.target, small.value
    else:
      return None

    if not isinstance(target, cst.Name) or target.value in self.program.exported_names:
      return None

    binding = self.program.resolve_binding(target)
    if binding is None or not self.program.is_single_assignment(binding):
      return None
    return target, value, binding

  def analyze(self, stmt: cst.SimpleStatementLine) -> Optional[StaticStyledComponent]:
    """
    Attempts to register the component declared by a statement.

    Args:
        stmt: The statement line.

    Returns:
        Optional[StaticStyledComponent]: The registered component, if any.
    """
    matched = self.match(stmt)
    if matched is None:
      return None
    target, value, binding = matched

    require_static = self.ctx.directives.is_static(stmt)
    primitive = self.config.primitive_name

    if isinstance(value, cst.Call):
      func = value.func
      positional = [a.value for a in value.args if a.keyword is None and not a.star]
      plain_args = len(positional) == len(value.args)

      if (
        isinstance(func, cst.Attribute)
        and isinstance(func.value, cst.Name)
        and func.value.value == primitive
        and func.attr.value[:1].islower()
        and plain_args
        and len(positional) == 1
      ):
        return self._analyze_direct(stmt, target, binding, func.attr.value, positional[0], require_static)

      if isinstance(func, cst.Name) and func.value == primitive and plain_args and len(positional) == 2:
        return self._analyze_extension(stmt, target, binding, positional[0], positional[1], require_static)

    if self._looks_like_component(target.value):
      return self._analyze_factory(stmt, target, binding, value, require_static)
    return None

  # --- Forms ---

  def _analyze_direct(
    self,
    stmt: cst.SimpleStatementLine,
    target: cst.Name,
    binding: BindingId,
    element_name: str,
    descriptor: cst.BaseExpression,
    require_static: bool,
  ) -> Optional[StaticStyledComponent]:
    style = fold_style(descriptor, self.program, self.ctx, stmt)
    if is_requires_runtime_result(style):
      self._report(stmt, style, require_static)
      return None
    return self._register(target, binding, element_name, (style,), None, require_static)

  def _analyze_extension(
    self,
    stmt: cst.SimpleStatementLine,
    target: cst.Name,
    binding: BindingId,
    parent_node: cst.BaseExpression,
    descriptor: cst.BaseExpression,
    require_static: bool,
  ) -> Optional[StaticStyledComponent]:
    if not isinstance(parent_node, cst.Name):
      return None
    parent = self.ctx.registry.get(self.program.resolve_binding(parent_node))
    if parent is None:
      return None

    style = fold_style(descriptor, self.program, self.ctx, stmt)
    if is_requires_runtime_result(style):
      self._report(stmt, style, require_static)
      return None

    styles = (*parent.styles, style)
    return self._register(target, binding, parent.element_name, styles, parent.binding, require_static)

  def _analyze_factory(
    self,
    stmt: cst.SimpleStatementLine,
    target: cst.Name,
    binding: BindingId,
    value: cst.BaseExpression,
    require_static: bool,
  ) -> Optional[StaticStyledComponent]:
    folded = evaluate(
      value,
      self.program,
      primitive_name=self.config.primitive_name,
      max_depth=self.config.max_evaluation_depth,
    )
    if not isinstance(folded, (StaticComponent, StaticElement)):
      return None

    for style in folded.styles:
      checked = _check_style(style, self.program, stmt)
      if is_requires_runtime_result(checked):
        self._report(stmt, checked, require_static)
        return None

    return self._register(target, binding, folded.element_name, tuple(folded.styles), None, require_static)

  # --- Helpers ---

  @staticmethod
  def _looks_like_component(name: str) -> bool:
    """Pascal-case heuristic: first letter uppercase, second lowercase."""
    return len(name) > 1 and name[0].isupper() and name[1].islower()

  def _register(
    self,
    target: cst.Name,
    binding: BindingId,
    element_name: str,
    styles: Tuple[EvaluatedStyle, ...],
    parent: Optional[BindingId],
    require_static: bool,
  ) -> StaticStyledComponent:
    component = StaticStyledComponent(
      component_name=target.value,
      element_name=element_name,
      styles=styles,
      binding=binding,
      parent=parent,
      require_static=require_static,
    )
    self.ctx.registry.register(component)
    self.ctx.tracer.log_registration(component.component_name, element_name, len(styles))
    return component

  def _report(self, stmt: cst.CSTNode, result: RequiresRuntimeResult, require_static: bool) -> None:
    if require_static:
      message = f"Component marked with {self.config.directive_tag('static')} could not be statically evaluated"
      severity = Severity.ERROR
    else:
      message = "Styled component could not be statically evaluated"
      severity = Severity.INFO
    self.ctx.emit(build_diagnostic(self.program, stmt, message, severity, result))
