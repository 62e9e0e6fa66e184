"""
End-to-end tests for the ExtractionEngine.

Each scenario runs the full collect / rewrite / re-run pipeline over a small
module and checks the emitted code, the diagnostics and the style stacks
handed to the style engine (which answers ``c1``, ``c2``... in call order).
"""

import textwrap

import pytest

from static_styled import extract as extract_code
from static_styled.config import RuntimeConfig
from static_styled.core.engine import ExtractionEngine
from static_styled.core.tracer import TraceEventType
from static_styled.enums import Severity
from static_styled.style.engine import AtomicStyleEngine


def _code(text: str) -> str:
  return textwrap.dedent(text).lstrip("\n")


def test_declaration_and_usage_are_inlined(extract, style_engine) -> None:
  result = extract(
    """
    Box = styled.div({"color": "red"})
    view = Box(css={"fontSize": 12})
    """
  )
  assert result.success
  assert result.code == 'view = html.div(className="c1")\n'
  assert style_engine.calls == [[{"color": "red"}, {"fontSize": 12}]]
  assert result.diagnostics == []
  assert result.passes_run == 2


def test_function_in_descriptor_is_left_alone(extract, style_engine) -> None:
  source = """
  Box = styled.div({"color": lambda: "red"})
  view = Box()
  """
  result = extract(source)

  assert result.code == _code(source)
  assert style_engine.calls == []
  (diagnostic,) = result.diagnostics
  assert diagnostic.severity == Severity.INFO
  assert diagnostic.message == "Styled component could not be statically evaluated"
  assert diagnostic.inner_diagnostic.message == "Functions in style objects require runtime"
  assert diagnostic.inner_diagnostic.source == 'lambda: "red"'


def test_deep_function_leaf_detected(extract) -> None:
  result = extract(
    """
    def pick():
        return "red"

    Box = styled.div({"a": {"b": [1, {"c": pick}]}})
    """
  )
  (diagnostic,) = result.diagnostics
  assert diagnostic.inner_diagnostic.message == "Functions in style objects require runtime"
  assert diagnostic.inner_diagnostic.line == 1


def test_called_helper_is_folded(extract, style_engine) -> None:
  result = extract(
    """
    def pick(name, scale=2):
        return {"color": name, "padding": 4 * scale}

    Box = styled.div(pick("red"))
    view = Box()
    """
  )
  assert style_engine.calls == [[{"color": "red", "padding": 8}]]
  assert 'view = html.div(className="c1")' in result.code
  assert "Box = " not in result.code


def test_extension_stack_order(extract, style_engine) -> None:
  result = extract(
    """
    A = styled.div({"a": 1})
    B = styled(A, {"b": 2})
    C = styled(B, {"c": 3})
    view = C()
    """
  )
  assert style_engine.calls == [[{"a": 1}, {"b": 2}, {"c": 3}]]
  assert result.code == 'view = html.div(className="c1")\n'


def test_arguments_are_preserved(extract) -> None:
  result = extract(
    """
    Box = styled.div({"color": "red"})
    view = Box("child", id="main", css={"margin": 0}, **extra)
    """
  )
  assert result.code == 'view = html.div("child", id="main", **extra, className="c1")\n'


def test_nested_markup(extract, style_engine) -> None:
  result = extract(
    """
    Box = styled.div({"a": 1})
    Label = styled.span({"b": 2})
    view = Box(Label(css={"c": 3}))
    """
  )
  assert result.code == 'view = html.div(html.span(className="c2"), className="c1")\n'
  assert style_engine.calls == [[{"a": 1}], [{"b": 2}, {"c": 3}]]
  assert [r.line for r in result.rewrites] == [3, 3]


def test_primitive_element_with_css(extract) -> None:
  result = extract(
    """
    view = styled.Div(id="a", css={"color": "red"})
    plain = styled.Div(id="b")
    """
  )
  assert result.code == 'view = html.div(id="a", className="c1")\nplain = styled.Div(id="b")\n'


def test_existing_class_name_is_merged(extract) -> None:
  result = extract(
    """
    Box = styled.div({"a": 1})
    view = Box(className="user")
    """
  )
  assert result.code == 'view = html.div(className="user c1")\n'


def test_dynamic_class_name_blocks_rewrite(extract) -> None:
  source = """
  Box = styled.div({"a": 1})
  view = Box(className=cls)
  """
  result = extract(source)
  assert result.code == _code(source)
  (diagnostic,) = result.diagnostics
  assert diagnostic.severity == Severity.WARNING
  assert diagnostic.message == "Existing className could not be merged with extracted styles"


def test_dynamic_css_keeps_declaration(extract) -> None:
  result = extract(
    """
    Box = styled.div({"a": 1})
    first = Box(css={"color": theme.primary})
    second = Box()
    """
  )
  assert result.code == _code(
    """
    Box = styled.div({"a": 1})
    first = Box(css={"color": theme.primary})
    second = html.div(className="c1")
    """
  )
  (diagnostic,) = result.diagnostics
  assert diagnostic.message == "css attribute could not be statically evaluated"
  assert diagnostic.line == 2


def test_escape_blocks_every_usage(extract, style_engine) -> None:
  source = """
  Box = styled.div({"color": "red"})
  view = Box()
  register(Box)
  """
  result = extract(source)

  assert result.code == _code(source)
  assert style_engine.calls == []
  (diagnostic,) = result.diagnostics
  assert diagnostic.message == "Component 'Box' cannot be statically extracted since it's used outside of markup"
  assert diagnostic.line == 3
  assert diagnostic.source == "register(Box)"
  assert result.passes_run == 3


def test_escape_found_after_usage_is_reverted(extract) -> None:
  """Verify a usage planned before the escape is discovered is not rewritten."""
  source = """
  def render():
      return Box()

  def use():
      return register(Box)

  Box = styled.div({"color": "red"})
  """
  result = extract(source)
  assert result.code == _code(source)
  assert result.rewrites == []
  assert len(result.diagnostics) == 1
  assert result.passes_run == 3


def test_one_diagnostic_per_escape_site(extract) -> None:
  result = extract(
    """
    Box = styled.div({"color": "red"})
    a = register(Box)
    b = [
        Box,
    ]
    """
  )
  assert [d.line for d in result.diagnostics] == [2, 4]


def test_escape_sites_on_one_line_are_reported_separately(extract) -> None:
  result = extract(
    """
    Box = styled.div({"color": "red"})
    items = [Box, Box]
    """
  )
  assert sorted((d.line, d.column) for d in result.diagnostics) == [(2, 9), (2, 14)]


def test_non_string_style_keys_are_left_alone(extract, style_engine) -> None:
  source = """
  Box = styled.div({1: "red"})
  Card = styled.div({"color": "red"})
  view = Box()
  card = Card(css={":hover": {2: "blue"}})
  """
  result = extract(source)

  assert result.code == _code(source)
  assert style_engine.calls == []
  assert [d.message for d in result.diagnostics] == [
    "Styled component could not be statically evaluated",
    "css attribute could not be statically evaluated",
  ]
  assert {d.inner_diagnostic.message for d in result.diagnostics} == {"Style keys must be strings"}


def test_oversized_style_value_keeps_declaration(extract, style_engine) -> None:
  source = """
  Box = styled.div({"content": "x" * 10**13})
  """
  result = extract(source)

  assert result.code == _code(source)
  assert style_engine.calls == []
  (diagnostic,) = result.diagnostics
  assert diagnostic.severity == Severity.INFO
  assert diagnostic.inner_diagnostic.message == "Repeated sequence too large to fold"


def test_composed_guard_on_returned_markup(extract) -> None:
  source = """
  def Button():
      return styled.Button(css={"color": "red"})

  Primary = styled(Button, {"color": "blue"})
  """
  result = extract(source)
  assert result.code == _code(source)
  (diagnostic,) = result.diagnostics
  assert "cannot be statically extracted inside components that are extended" in diagnostic.message
  assert diagnostic.severity == Severity.INFO


def test_composed_guard_ignores_conditional_markup(extract) -> None:
  result = extract(
    """
    def Button(primary):
        return styled.Button(css={"color": "red"}) if primary else None

    Primary = styled(Button, {"color": "blue"})
    """
  )
  assert 'return html.button(className="c1") if primary else None' in result.code
  assert result.diagnostics == []


def test_anonymous_composition_keeps_declaration(extract) -> None:
  result = extract(
    """
    Box = styled.div({"color": "red"})

    def make():
        return styled(Box, {"color": dynamic()})

    view = Box()
    """
  )
  assert 'Box = styled.div({"color": "red"})' in result.code
  assert 'view = html.div(className="c1")' in result.code


def test_all_dynamic_file(extract, style_engine) -> None:
  source = """
  # @styled-all-dynamic
  Box = styled.div({"color": "red"})
  view = Box()
  """
  result = extract(source)
  assert result.code == _code(source)
  assert result.passes_run == 0
  assert result.diagnostics == []
  assert style_engine.calls == []


def test_all_static_file_escalates(extract) -> None:
  result = extract(
    """
    # @styled-all-static
    Box = styled.div({"color": pick()})
    Other = styled.div({"color": "red"})
    register(Other)
    """
  )
  assert [d.severity for d in result.diagnostics] == [Severity.ERROR, Severity.ERROR]
  assert result.has_errors
  assert result.success


def test_global_all_static(extract) -> None:
  result = extract('Box = styled.div({"color": pick()})\n', all_static=True)
  assert result.diagnostics[0].severity == Severity.ERROR


def test_dynamic_statement_is_exempt(extract) -> None:
  result = extract(
    """
    Box = styled.div({"color": "red"})
    a = Box(css={"margin": 0})  # @styled-dynamic
    b = Box()
    """
  )
  assert result.code == _code(
    """
    Box = styled.div({"color": "red"})
    a = Box(css={"margin": 0})  # @styled-dynamic
    b = html.div(className="c1")
    """
  )


def test_dynamic_function_is_exempt(extract) -> None:
  source = """
  Box = styled.div({"color": "red"})

  def render():  # @styled-dynamic
      return Box()
  """
  result = extract(source)
  assert result.code == _code(source)


def test_exported_component_is_not_touched(extract) -> None:
  source = """
  __all__ = ["Box"]
  Box = styled.div({"color": "red"})
  view = Box()
  """
  assert extract(source).code == _code(source)


def test_rebound_component_is_not_touched(extract) -> None:
  source = """
  Box = styled.div({"color": "red"})
  Box = wrap(Box)
  view = Box()
  """
  assert extract(source).code == _code(source)


def test_custom_names(extract) -> None:
  result = extract(
    """
    Box = sx.div({"color": "red"})
    view = Box(style={"margin": 0})
    """,
    primitive_name="sx",
    css_attribute="style",
    class_attribute="class_",
    element_namespace="h",
  )
  assert result.code == 'view = h.div(class_="c1")\n'


def test_parse_failure_returns_input(extract) -> None:
  result = extract("Box = styled.div({\n")
  assert not result.success
  assert result.code == "Box = styled.div({\n"
  assert result.errors[0].startswith("Parse Error")
  types = [event["type"] for event in result.trace_events]
  assert types.count(TraceEventType.PHASE_START) == types.count(TraceEventType.PHASE_END) == 2


def test_rewrite_provenance(extract) -> None:
  result = extract(
    """
    Box = styled.div({"color": "red"})
    view = Box(css={"margin": 0})
    """
  )
  (record,) = result.rewrites
  assert record.file == "view.py"
  assert record.line == 2
  assert record.original == 'Box(css={"margin": 0})'
  assert record.replacement == 'html.div(className="c1")'
  assert record.class_name == "c1"
  assert any(e["type"] == "ast_mutation" for e in result.trace_events)


def test_idempotent() -> None:
  """Verify running the transform on its own output changes nothing."""
  source = _code(
    """
    Box = styled.div({"color": "red", ":hover": {"color": "blue"}})
    Fancy = styled(Box, {"margin": 4})
    keep = register(Box)
    view = Fancy(css={"padding": 2})
    plain = styled.Span(css={"fontWeight": 700})
    """
  )
  engine = ExtractionEngine(config=RuntimeConfig(), style_engine=AtomicStyleEngine())
  once = engine.run(source).code
  twice = engine.run(once).code
  assert once == twice
  assert 'plain = html.span(className="' in once


def test_extract_helper() -> None:
  code = extract_code('Box = styled.div({"color": "red"})\nview = Box()\n')
  assert code == 'view = html.div(className="a")\n'


def test_extract_helper_raises_on_parse_failure() -> None:
  with pytest.raises(ValueError, match="Extraction failed"):
    extract_code("def (:\n")
