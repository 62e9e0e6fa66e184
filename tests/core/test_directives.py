"""
Tests for Directive Comment Resolution.
"""

import libcst as cst

from static_styled.config import RuntimeConfig
from static_styled.core.directives import DirectiveIndex, statement_comments
from static_styled.enums import Directive


def _index(code: str, **overrides) -> DirectiveIndex:
  return DirectiveIndex(cst.parse_module(code), RuntimeConfig(**overrides))


def test_statement_comments_sources() -> None:
  """Verify leading, trailing and block header comments are all collected."""
  module = cst.parse_module("x = 0\n# above\n@decorate\ndef f():  # header\n    pass\n\nx = 1  # trailing\n")
  assert statement_comments(module.body[0]) == []
  assert statement_comments(module.body[1]) == ["# above", "# header"]
  assert statement_comments(module.body[2]) == ["# trailing"]


def test_file_all_dynamic_in_header() -> None:
  index = _index("# @styled-all-dynamic\n\nBox = styled.div({})\n")
  assert index.file_all_dynamic
  assert not index.file_all_static


def test_file_all_static_in_footer() -> None:
  index = _index("Box = styled.div({})\n# @styled-all-static\n")
  assert index.file_all_static


def test_global_all_static_config() -> None:
  index = _index("Box = styled.div({})\n", all_static=True)
  assert index.file_all_static
  assert index.is_static(cst.parse_module("x = 1\n").body[0])


def test_statement_level_directives() -> None:
  module = cst.parse_module(
    "Box = styled.div({})  # @styled-static\n# @styled-dynamic\nview = Box()\ndef f():  # @styled-dynamic\n    pass\n"
  )
  index = DirectiveIndex(module, RuntimeConfig())
  box, view, func = module.body

  assert index.directives_of(box) == {Directive.STATIC}
  assert index.is_static(box)
  assert not index.is_dynamic(box)
  assert index.is_dynamic(view)
  assert index.is_dynamic(func)


def test_markers_match_whole_tokens() -> None:
  """Verify near-miss markers are ignored."""
  module = cst.parse_module("Box = styled.div({})  # @styled-staticky see @styled-dynamics\n")
  index = DirectiveIndex(module, RuntimeConfig())
  assert index.directives_of(module.body[0]) == set()


def test_marker_among_other_text() -> None:
  module = cst.parse_module("Box = styled.div({})  # keep @styled-dynamic for now\n")
  assert DirectiveIndex(module, RuntimeConfig()).is_dynamic(module.body[0])


def test_custom_namespace() -> None:
  index = _index("# @sx-all-dynamic\nx = 1\n", directive_namespace="sx")
  assert index.file_all_dynamic
  assert not _index("# @styled-all-dynamic\nx = 1\n", directive_namespace="sx").file_all_dynamic
