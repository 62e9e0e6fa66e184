"""
Tests for the Declaration Analyzer.

Covers the direct, extension and factory declaration forms, eligibility of
the declaring statement, and diagnostics for descriptors requiring runtime.
"""

import textwrap
from typing import Tuple
from unittest.mock import MagicMock

import libcst as cst

from static_styled.analysis.declarations import (
  DeclarationAnalyzer,
  find_function_leaf,
  has_non_string_key,
  is_evaluable_style,
)
from static_styled.config import RuntimeConfig
from static_styled.core.evaluator import FunctionValue
from static_styled.core.program import BindingId, SourceProgram
from static_styled.core.rewriter.context import ExtractionContext
from static_styled.enums import Severity
from static_styled.style.base import StyleEngine


def _analyze(code: str, **overrides) -> Tuple[ExtractionContext, SourceProgram]:
  module = cst.parse_module(textwrap.dedent(code).lstrip("\n"))
  ctx = ExtractionContext(module, RuntimeConfig(**overrides), MagicMock(spec=StyleEngine), filename="view.py")
  program = SourceProgram(module, "view.py")
  analyzer = DeclarationAnalyzer(program, ctx)
  for stmt in program.module.body:
    if isinstance(stmt, cst.SimpleStatementLine):
      analyzer.analyze(stmt)
  return ctx, program


def _components(ctx: ExtractionContext):
  return {c.component_name: c for c in ctx.registry.symbol_to_component.values()}


def test_find_function_leaf() -> None:
  leaf = FunctionValue(MagicMock())
  assert find_function_leaf({"a": {"b": [1, leaf]}}) is leaf
  assert find_function_leaf({"a": [1, {"b": 2}]}) is None
  assert is_evaluable_style({"a": 1})
  assert not is_evaluable_style([{"a": 1}])


def test_has_non_string_key() -> None:
  assert has_non_string_key({"a": {"b": [{2: "x"}]}})
  assert not has_non_string_key({"a": [1, {"b": 2}]})
  assert not is_evaluable_style({"a": {None: 1}})


def test_direct_form() -> None:
  ctx, _ = _analyze('Box = styled.div({"color": "red"})\n')
  box = _components(ctx)["Box"]
  assert box.element_name == "div"
  assert box.styles == ({"color": "red"},)
  assert box.binding == BindingId("Box", 1, 0)
  assert box.parent is None
  assert ctx.emitter.emitted == []


def test_annotated_declaration() -> None:
  ctx, _ = _analyze('Box: Component = styled.div({"color": "red"})\n')
  assert "Box" in _components(ctx)


def test_extension_form_stacks_styles() -> None:
  ctx, _ = _analyze(
    """
    A = styled.div({"a": 1})
    B = styled(A, {"b": 2})
    C = styled(B, {"c": 3})
    """
  )
  components = _components(ctx)
  assert components["C"].styles == ({"a": 1}, {"b": 2}, {"c": 3})
  assert components["C"].element_name == "div"
  assert components["C"].parent == components["B"].binding


def test_extension_requires_registered_parent() -> None:
  """Verify order matters and unknown parents are not folded generically."""
  ctx, _ = _analyze(
    """
    Fancy = styled(Box, {"b": 2})
    Box = styled.div({"a": 1})
    """
  )
  assert set(_components(ctx)) == {"Box"}


def test_factory_form() -> None:
  ctx, _ = _analyze(
    """
    def make_card(color):
        return styled.section({"color": color})

    Card = make_card("red")
    card = make_card("blue")
    """
  )
  components = _components(ctx)
  assert set(components) == {"Card"}
  assert components["Card"].styles == ({"color": "red"},)


def test_factory_element_without_styles() -> None:
  ctx, _ = _analyze("Div = styled.Div\n")
  assert _components(ctx)["Div"].styles == ()


def test_ineligible_statements() -> None:
  ctx, _ = _analyze(
    """
    __all__ = ["Exported"]
    Exported = styled.div({"a": 1})
    Twice = styled.div({"a": 1})
    Twice = styled.span({"a": 1})
    A = B = styled.div({"a": 1})
    One = styled.div({"a": 1}); Two = styled.div({"a": 2})
    Kw = styled.div(style={"a": 1})
    """
  )
  assert _components(ctx) == {}


def test_function_leaf_reported_at_function() -> None:
  ctx, _ = _analyze(
    """
    Box = styled.div({
        "color": "red",
        "nested": {"hover": lambda: "blue"},
    })
    """
  )
  assert _components(ctx) == {}
  (diagnostic,) = ctx.emitter.emitted
  assert diagnostic.message == "Styled component could not be statically evaluated"
  assert diagnostic.severity == Severity.INFO
  assert diagnostic.line == 1
  assert diagnostic.inner_diagnostic.message == "Functions in style objects require runtime"
  assert diagnostic.inner_diagnostic.line == 3
  assert diagnostic.inner_diagnostic.source == 'lambda: "blue"'


def test_static_directive_escalates() -> None:
  ctx, _ = _analyze('Box = styled.div({"color": theme()})  # @styled-static\n')
  (diagnostic,) = ctx.emitter.emitted
  assert diagnostic.message == "Component marked with @styled-static could not be statically evaluated"
  assert diagnostic.severity == Severity.ERROR


def test_static_directive_recorded_on_component() -> None:
  ctx, _ = _analyze('Box = styled.div({"color": "red"})  # @styled-static\n')
  assert _components(ctx)["Box"].require_static


def test_non_mapping_descriptor() -> None:
  ctx, _ = _analyze('Box = styled.div(["color"])\n')
  (diagnostic,) = ctx.emitter.emitted
  assert diagnostic.inner_diagnostic.message == "Style descriptor must evaluate to a mapping"


def test_custom_primitive() -> None:
  ctx, _ = _analyze('Box = sx.div({"color": "red"})\nOther = styled.div({"a": 1})\n', primitive_name="sx")
  assert set(_components(ctx)) == {"Box"}


def test_non_string_key_in_descriptor() -> None:
  ctx, _ = _analyze('Box = styled.div({"color": "red", ":hover": {1: "blue"}})\n')
  assert _components(ctx) == {}
  (diagnostic,) = ctx.emitter.emitted
  assert diagnostic.severity == Severity.INFO
  assert diagnostic.inner_diagnostic.message == "Style keys must be strings"


def test_non_string_key_in_factory() -> None:
  ctx, _ = _analyze(
    """
    def make_card():
        return styled.section({1: "red"})

    Card = make_card()
    """
  )
  assert _components(ctx) == {}
  (diagnostic,) = ctx.emitter.emitted
  assert diagnostic.line == 4
  assert diagnostic.inner_diagnostic.message == "Style keys must be strings"
