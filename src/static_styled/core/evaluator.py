"""
Constant Expression Evaluator.

Folds LibCST expressions to Python constants so style descriptors can be
computed at build time. Supported forms:

1.  **Literals**: numbers, strings (including implicit concatenation and
    f-strings over constant parts), ``True``/``False``/``None``, dicts,
    lists and tuples (with ``*``/``**`` unpacking of constant operands).
2.  **Operators**: unary, binary, boolean, comparison and conditional
    expressions over constants, plus constant subscripts.
3.  **Names**: resolved through `SourceProgram` to a single assignment whose
    value is folded recursively (whole-file symbol resolution).
4.  **Calls**: the styling primitive (``styled.div({...})``,
    ``styled(Base, {...})``), the ``dict`` builtin, and partial evaluation of
    lambdas and ``def`` functions whose body is a single ``return``.

Functions are not called unless invoked by the folded expression itself; a
bare ``lambda`` or ``def`` reference folds to a `FunctionValue` leaf, which
style analysis treats as requiring runtime.

Anything else yields a `RequiresRuntimeResult` pointing at the node that
could not be folded.
"""

import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Type, Union

import libcst as cst

from static_styled.core.diagnostics import InnerDiagnostic
from static_styled.core.program import BindingId, SourceProgram

EvaluatedStyle = Dict[str, Any]


@dataclass(frozen=True)
class FunctionValue:
  """
  A function-typed constant. Invalidates any style descriptor containing it.
  """

  node: cst.CSTNode
  name: str = "<lambda>"


@dataclass(frozen=True)
class StaticElement:
  """
  A plain element reachable through the primitive (``styled.Div``).
  """

  element_name: str
  styles: Tuple[EvaluatedStyle, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class StaticComponent:
  """
  A styled component produced by folding a primitive call.
  """

  element_name: str
  styles: Tuple[EvaluatedStyle, ...] = field(default_factory=tuple)


class RequiresRuntimeResult:
  """
  Opaque marker for a value that cannot be computed at build time.
  """

  def __init__(self, reason: str, node: cst.CSTNode, program: SourceProgram) -> None:
    """
    Args:
        reason: Why the value requires runtime evaluation.
        node: The originating node.
        program: The program the node belongs to.
    """
    self.reason = reason
    self.node = node
    self._diagnostic = InnerDiagnostic(
      file=program.filename,
      line=program.line_of(node),
      message=reason,
      source=program.source_of(node),
    )

  def get_diagnostics(self) -> InnerDiagnostic:
    """
    Returns the originating location of the failure.
    """
    return self._diagnostic

  def __repr__(self) -> str:
    return f"RequiresRuntimeResult({self.reason!r}, line={self._diagnostic.line})"


class _RequiresRuntime(Exception):
  """Internal signal unwinding the evaluator to the public entry point."""

  def __init__(self, reason: str, node: cst.CSTNode) -> None:
    super().__init__(reason)
    self.reason = reason
    self.node = node


def requires_runtime_result(reason: str, node: cst.CSTNode, program: SourceProgram) -> RequiresRuntimeResult:
  """
  Creates a `RequiresRuntimeResult` for a node.

  Args:
      reason: Human readable explanation.
      node: The node that could not be folded.
      program: The program the node belongs to.

  Returns:
      RequiresRuntimeResult: The marker.
  """
  return RequiresRuntimeResult(reason, node, program)


def is_requires_runtime_result(value: Any) -> bool:
  """
  Checks whether an evaluation outcome is the runtime marker.
  """
  return isinstance(value, RequiresRuntimeResult)


def evaluate(
  node: cst.BaseExpression,
  program: SourceProgram,
  env: Optional[Dict[str, Any]] = None,
  primitive_name: str = "styled",
  max_depth: int = 32,
) -> Union[Any, RequiresRuntimeResult]:
  """
  Folds an expression to a constant.

  Args:
      node: The expression, which must belong to ``program.module``.
      program: Semantic view used to resolve names.
      env: Pre-bound names shadowing file bindings (e.g. function parameters).
      primitive_name: Name of the styling primitive.
      max_depth: Limit for nested name resolution and function calls.

  Returns:
      The constant value, or a `RequiresRuntimeResult`.
  """
  evaluator = _Evaluator(program, primitive_name, max_depth)
  try:
    return evaluator.eval(node, dict(env or {}))
  except _RequiresRuntime as e:
    return RequiresRuntimeResult(e.reason, e.node, program)


_MAX_EXPONENT = 256
_MAX_SEQUENCE_LENGTH = 100_000
_MAX_RESULT_BITS = 1 << 16


def _check_operation_size(operator_node: cst.BaseBinaryOp, left: Any, right: Any) -> Optional[str]:
  """Rejects folds whose result would be too large to build at compile time."""
  if isinstance(operator_node, cst.Power):
    if isinstance(left, int) and isinstance(right, int) and abs(left) > 1:
      if abs(right) > _MAX_EXPONENT or left.bit_length() * right > _MAX_RESULT_BITS:
        return "Exponent too large to fold"
  elif isinstance(operator_node, cst.Multiply):
    for seq, count in ((left, right), (right, left)):
      if isinstance(seq, (str, list, tuple)) and isinstance(count, int):
        if len(seq) * count > _MAX_SEQUENCE_LENGTH:
          return "Repeated sequence too large to fold"
  return None


_BINARY_OPS: Dict[Type[cst.CSTNode], Callable[[Any, Any], Any]] = {
  cst.Add: operator.add,
  cst.Subtract: operator.sub,
  cst.Multiply: operator.mul,
  cst.Divide: operator.truediv,
  cst.FloorDivide: operator.floordiv,
  cst.Modulo: operator.mod,
  cst.Power: operator.pow,
}

_COMPARE_OPS: Dict[Type[cst.CSTNode], Callable[[Any, Any], Any]] = {
  cst.Equal: operator.eq,
  cst.NotEqual: operator.ne,
  cst.LessThan: operator.lt,
  cst.LessThanEqual: operator.le,
  cst.GreaterThan: operator.gt,
  cst.GreaterThanEqual: operator.ge,
  cst.In: lambda a, b: a in b,
  cst.NotIn: lambda a, b: a not in b,
  cst.Is: operator.is_,
  cst.IsNot: operator.is_not,
}

_PRIMITIVES = (str, int, float, bool, type(None))


class _Evaluator:
  """
  Recursive folding over one program. Not reusable across programs.
  """

  def __init__(self, program: SourceProgram, primitive_name: str, max_depth: int) -> None:
    self.program = program
    self.primitive_name = primitive_name
    self.max_depth = max_depth
    self._depth = 0
    self._resolving: Set[BindingId] = set()

  def eval(self, node: cst.BaseExpression, env: Dict[str, Any]) -> Any:
    """Dispatches on the node type."""
    handler = getattr(self, f"_eval_{type(node).__name__}", None)
    if handler is None:
      raise _RequiresRuntime(f"Unsupported expression '{type(node).__name__}'", node)
    return handler(node, env)

  # --- Literals ---

  def _eval_Integer(self, node: cst.Integer, env: Dict[str, Any]) -> Any:
    return node.evaluated_value

  def _eval_Float(self, node: cst.Float, env: Dict[str, Any]) -> Any:
    return node.evaluated_value

  def _eval_SimpleString(self, node: cst.SimpleString, env: Dict[str, Any]) -> Any:
    value = node.evaluated_value
    if not isinstance(value, str):
      raise _RequiresRuntime("Byte strings are not supported in styles", node)
    return value

  def _eval_ConcatenatedString(self, node: cst.ConcatenatedString, env: Dict[str, Any]) -> Any:
    left = self.eval(node.left, env)
    right = self.eval(node.right, env)
    return left + right

  def _eval_FormattedString(self, node: cst.FormattedString, env: Dict[str, Any]) -> Any:
    parts: List[str] = []
    for part in node.parts:
      if isinstance(part, cst.FormattedStringText):
        parts.append(part.value)
        continue
      if part.conversion is not None or part.format_spec is not None:
        raise _RequiresRuntime("Formatted values with conversions or specs require runtime", part)
      value = self.eval(part.expression, env)
      if not isinstance(value, _PRIMITIVES):
        raise _RequiresRuntime("Only primitive values can be interpolated", part)
      parts.append(str(value))
    return "".join(parts)

  def _eval_Dict(self, node: cst.Dict, env: Dict[str, Any]) -> Any:
    result: Dict[Any, Any] = {}
    for element in node.elements:
      if isinstance(element, cst.StarredDictElement):
        spread = self.eval(element.value, env)
        if not isinstance(spread, dict):
          raise _RequiresRuntime("Only constant mappings can be unpacked", element)
        result.update(spread)
        continue
      key = self.eval(element.key, env)
      if not isinstance(key, _PRIMITIVES):
        raise _RequiresRuntime("Mapping keys must be primitive constants", element.key)
      result[key] = self.eval(element.value, env)
    return result

  def _eval_sequence(self, node: Union[cst.List, cst.Tuple], env: Dict[str, Any]) -> List[Any]:
    result: List[Any] = []
    for element in node.elements:
      if isinstance(element, cst.StarredElement):
        spread = self.eval(element.value, env)
        if not isinstance(spread, (list, tuple)):
          raise _RequiresRuntime("Only constant sequences can be unpacked", element)
        result.extend(spread)
      else:
        result.append(self.eval(element.value, env))
    return result

  def _eval_List(self, node: cst.List, env: Dict[str, Any]) -> Any:
    return self._eval_sequence(node, env)

  def _eval_Tuple(self, node: cst.Tuple, env: Dict[str, Any]) -> Any:
    return self._eval_sequence(node, env)

  # --- Operators ---

  def _eval_UnaryOperation(self, node: cst.UnaryOperation, env: Dict[str, Any]) -> Any:
    value = self.eval(node.expression, env)
    op = node.operator
    if isinstance(op, cst.Not):
      return not value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
      raise _RequiresRuntime("Unary arithmetic requires a number", node)
    if isinstance(op, cst.Minus):
      return -value
    if isinstance(op, cst.Plus):
      return +value
    if isinstance(op, cst.BitInvert) and isinstance(value, int):
      return ~value
    raise _RequiresRuntime("Unsupported unary operator", node)

  def _eval_BinaryOperation(self, node: cst.BinaryOperation, env: Dict[str, Any]) -> Any:
    func = _BINARY_OPS.get(type(node.operator))
    if func is None:
      raise _RequiresRuntime("Unsupported binary operator", node)
    left = self.eval(node.left, env)
    right = self.eval(node.right, env)
    for operand in (left, right):
      if isinstance(operand, (FunctionValue, StaticComponent, StaticElement)):
        raise _RequiresRuntime("Operators only apply to data constants", node)
    too_large = _check_operation_size(node.operator, left, right)
    if too_large:
      raise _RequiresRuntime(too_large, node)
    try:
      return func(left, right)
    except (TypeError, ValueError, ZeroDivisionError, OverflowError, MemoryError) as e:
      raise _RequiresRuntime(f"Operation failed: {e}", node)

  def _eval_BooleanOperation(self, node: cst.BooleanOperation, env: Dict[str, Any]) -> Any:
    left = self.eval(node.left, env)
    if isinstance(node.operator, cst.And):
      return self.eval(node.right, env) if left else left
    return left if left else self.eval(node.right, env)

  def _eval_Comparison(self, node: cst.Comparison, env: Dict[str, Any]) -> Any:
    left = self.eval(node.left, env)
    for target in node.comparisons:
      func = _COMPARE_OPS.get(type(target.operator))
      if func is None:
        raise _RequiresRuntime("Unsupported comparison", node)
      right = self.eval(target.comparator, env)
      try:
        if not func(left, right):
          return False
      except TypeError as e:
        raise _RequiresRuntime(f"Comparison failed: {e}", node)
      left = right
    return True

  def _eval_IfExp(self, node: cst.IfExp, env: Dict[str, Any]) -> Any:
    if self.eval(node.test, env):
      return self.eval(node.body, env)
    return self.eval(node.orelse, env)

  def _eval_Subscript(self, node: cst.Subscript, env: Dict[str, Any]) -> Any:
    container = self.eval(node.value, env)
    if len(node.slice) != 1 or not isinstance(node.slice[0].slice, cst.Index):
      raise _RequiresRuntime("Only single constant subscripts are supported", node)
    key = self.eval(node.slice[0].slice.value, env)
    if not isinstance(container, (dict, list, str)):
      raise _RequiresRuntime("Subscript target is not a constant container", node)
    try:
      return container[key]
    except (KeyError, IndexError, TypeError) as e:
      raise _RequiresRuntime(f"Subscript failed: {e!r}", node)

  # --- Names & Attributes ---

  def _eval_Name(self, node: cst.Name, env: Dict[str, Any]) -> Any:
    if node.value in env:
      return env[node.value]
    if node.value == "True":
      return True
    if node.value == "False":
      return False
    if node.value == "None":
      return None

    binding = self.program.resolve_binding(node)
    if binding is None:
      raise _RequiresRuntime(f"'{node.value}' cannot be resolved statically", node)
    if not self.program.is_single_assignment(binding):
      raise _RequiresRuntime(f"'{node.value}' is reassigned", node)

    definition = self.program.definition_of(binding)
    if isinstance(definition, cst.FunctionDef):
      return FunctionValue(definition, definition.name.value)
    if definition is None or isinstance(definition, cst.ClassDef):
      raise _RequiresRuntime(f"'{node.value}' is not bound to a constant expression", node)

    if binding in self._resolving:
      raise _RequiresRuntime(f"'{node.value}' is defined in terms of itself", node)

    self._enter(node)
    self._resolving.add(binding)
    try:
      return self.eval(definition, {})
    finally:
      self._resolving.discard(binding)
      self._leave()

  def _eval_Attribute(self, node: cst.Attribute, env: Dict[str, Any]) -> Any:
    tag = node.attr.value
    if self._is_primitive(node.value) and tag[:1].isupper():
      return StaticElement(tag.lower())
    raise _RequiresRuntime("Attribute access requires runtime", node)

  def _eval_Lambda(self, node: cst.Lambda, env: Dict[str, Any]) -> Any:
    return FunctionValue(node)

  # --- Calls ---

  def _eval_Call(self, node: cst.Call, env: Dict[str, Any]) -> Any:
    func = node.func

    if isinstance(func, cst.Attribute) and self._is_primitive(func.value):
      return self._eval_primitive_member_call(node, func.attr.value, env)

    if self._is_primitive(func):
      return self._eval_composition_call(node, env)

    if isinstance(func, cst.Name) and func.value == "dict" and func.value not in env:
      if self.program.resolve_binding(func) is None:
        return self._eval_dict_call(node, env)

    callee = self.eval(func, env)
    if not isinstance(callee, FunctionValue):
      raise _RequiresRuntime("Only constant functions can be called", node)
    return self._call_function(callee, node, env)

  def _eval_primitive_member_call(self, node: cst.Call, tag: str, env: Dict[str, Any]) -> Any:
    if tag[:1].isupper():
      raise _RequiresRuntime(f"'{self.primitive_name}.{tag}' renders an element at runtime", node)
    positional = self._positional_args(node)
    if len(positional) != 1:
      raise _RequiresRuntime("Styled element factories take exactly one style argument", node)
    style = self.eval(positional[0], env)
    if not isinstance(style, dict):
      raise _RequiresRuntime("Style argument must be a mapping", positional[0])
    return StaticComponent(tag, (style,))

  def _eval_composition_call(self, node: cst.Call, env: Dict[str, Any]) -> Any:
    positional = self._positional_args(node)
    if len(positional) != 2:
      raise _RequiresRuntime("Composition takes a component and a style argument", node)
    base = self.eval(positional[0], env)
    if not isinstance(base, (StaticComponent, StaticElement)):
      raise _RequiresRuntime("Composed component is not static", positional[0])
    style = self.eval(positional[1], env)
    if not isinstance(style, dict):
      raise _RequiresRuntime("Style argument must be a mapping", positional[1])
    return StaticComponent(base.element_name, (*base.styles, style))

  def _eval_dict_call(self, node: cst.Call, env: Dict[str, Any]) -> Any:
    result: Dict[Any, Any] = {}
    for arg in node.args:
      if arg.keyword is not None:
        result[arg.keyword.value] = self.eval(arg.value, env)
        continue
      value = self.eval(arg.value, env)
      if arg.star not in ("", "**") or not isinstance(value, dict):
        raise _RequiresRuntime("dict() only folds mappings and keywords", arg)
      result.update(value)
    return result

  def _call_function(self, callee: FunctionValue, node: cst.Call, env: Dict[str, Any]) -> Any:
    target = callee.node
    if isinstance(target, cst.Lambda):
      params, body = target.params, target.body
    elif isinstance(target, cst.FunctionDef):
      params, body = target.params, self._single_return(target)
    else:
      raise _RequiresRuntime("Callee is not a function", node)

    bound = self._bind_arguments(params, node, env)

    self._enter(node)
    try:
      return self.eval(body, bound)
    finally:
      self._leave()

  def _single_return(self, func: cst.FunctionDef) -> cst.BaseExpression:
    """Extracts the returned expression of a ``def`` whose body is one return."""
    if func.decorators or func.asynchronous is not None or not isinstance(func.body, cst.IndentedBlock):
      raise _RequiresRuntime(f"'{func.name.value}' cannot be partially evaluated", func)

    statements = list(func.body.body)
    if statements and self._is_docstring(statements[0]):
      statements = statements[1:]

    if len(statements) == 1 and isinstance(statements[0], cst.SimpleStatementLine):
      line = statements[0]
      if len(line.body) == 1 and isinstance(line.body[0], cst.Return) and line.body[0].value is not None:
        return line.body[0].value

    raise _RequiresRuntime(f"'{func.name.value}' must consist of a single return statement", func)

  def _bind_arguments(self, params: cst.Parameters, node: cst.Call, env: Dict[str, Any]) -> Dict[str, Any]:
    """Maps call arguments onto parameters, evaluating defaults when missing."""
    if isinstance(params.star_arg, cst.Param) or params.star_kwarg is not None:
      raise _RequiresRuntime("Variadic parameters are not supported", node)

    positional_params = [*params.posonly_params, *params.params]
    keyword_params = {p.name.value: p for p in [*params.params, *params.kwonly_params]}
    bound: Dict[str, Any] = {}

    index = 0
    for arg in node.args:
      if arg.star:
        raise _RequiresRuntime("Argument unpacking is not supported", arg)
      value = self.eval(arg.value, env)
      if arg.keyword is None:
        if index >= len(positional_params):
          raise _RequiresRuntime("Too many positional arguments", arg)
        bound[positional_params[index].name.value] = value
        index += 1
      else:
        name = arg.keyword.value
        if name not in keyword_params or name in bound:
          raise _RequiresRuntime(f"Unexpected keyword argument '{name}'", arg)
        bound[name] = value

    for param in [*positional_params, *params.kwonly_params]:
      name = param.name.value
      if name in bound:
        continue
      if param.default is None:
        raise _RequiresRuntime(f"Missing argument '{name}'", node)
      bound[name] = self.eval(param.default, {})

    return bound

  # --- Helpers ---

  def _is_primitive(self, node: cst.BaseExpression) -> bool:
    return isinstance(node, cst.Name) and node.value == self.primitive_name

  @staticmethod
  def _positional_args(node: cst.Call) -> List[cst.BaseExpression]:
    if any(arg.keyword is not None or arg.star for arg in node.args):
      return []
    return [arg.value for arg in node.args]

  @staticmethod
  def _is_docstring(stmt: cst.BaseStatement) -> bool:
    return (
      isinstance(stmt, cst.SimpleStatementLine)
      and len(stmt.body) == 1
      and isinstance(stmt.body[0], cst.Expr)
      and isinstance(stmt.body[0].value, (cst.SimpleString, cst.ConcatenatedString))
    )

  def _enter(self, node: cst.CSTNode) -> None:
    self._depth += 1
    if self._depth > self.max_depth:
      self._depth -= 1
      raise _RequiresRuntime("Evaluation depth exceeded", node)

  def _leave(self) -> None:
    self._depth -= 1
