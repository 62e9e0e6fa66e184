"""
Tests for the Atomic Style Engine.
"""

from static_styled.style.engine import AtomicStyleEngine, format_value, hyphenate, merge_styles


def test_hyphenate() -> None:
  assert hyphenate("backgroundColor") == "background-color"
  assert hyphenate("WebkitTransition") == "-webkit-transition"
  assert hyphenate("msFlex") == "-ms-flex"
  assert hyphenate("color") == "color"


def test_format_value() -> None:
  assert format_value("font-size", 12) == "12px"
  assert format_value("margin", 0) == "0"
  assert format_value("line-height", 1.5) == "1.5"
  assert format_value("opacity", 1) == "1"
  assert format_value("color", "red") == "red"


def test_merge_styles_is_deep() -> None:
  merged = merge_styles([{"color": "red", ":hover": {"color": "blue", "margin": 1}}, {":hover": {"color": "green"}}])
  assert merged == {"color": "red", ":hover": {"color": "green", "margin": 1}}


def test_inject_later_entries_win() -> None:
  engine = AtomicStyleEngine()
  assert engine.inject_style([{"color": "red"}, {"color": "blue"}]) == "a"
  assert engine.get_style_sheet() == ".a{color:blue}"


def test_declarations_are_shared() -> None:
  engine = AtomicStyleEngine()
  first = engine.inject_style([{"color": "red", "fontSize": 12}])
  second = engine.inject_style([{"fontSize": 12, "margin": 0}])
  assert first == "a b"
  assert second == "b c"
  assert engine.get_style_sheet() == ".a{color:red}.b{font-size:12px}.c{margin:0}"


def test_pseudo_and_attribute_selectors() -> None:
  engine = AtomicStyleEngine()
  names = engine.inject_style([{":hover": {"color": "red"}, "[disabled]": {"opacity": 0.5}}])
  assert names == "a b"
  assert engine.get_style_sheet() == ".a:hover{color:red}.b[disabled]{opacity:0.5}"


def test_media_queries() -> None:
  engine = AtomicStyleEngine()
  engine.inject_style(
    [
      {
        "color": "red",
        "@media (min-width: 768px)": {"color": "blue", "@media (hover: hover)": {":hover": {"color": "green"}}},
      }
    ]
  )
  assert engine.get_style_sheet() == (
    ".a{color:red}"
    "@media (min-width: 768px){.b{color:blue}}"
    "@media (min-width: 768px) and (hover: hover){.c:hover{color:green}}"
  )
  assert engine.get_style_sheet(media="@media (min-width: 768px)") == "@media (min-width: 768px){.b{color:blue}}"


def test_fallbacks_and_none() -> None:
  engine = AtomicStyleEngine()
  names = engine.inject_style([{"display": ["-webkit-flex", "flex"], "color": None}])
  assert names == "a"
  assert engine.get_style_sheet() == ".a{display:-webkit-flex;display:flex}"


def test_prefix() -> None:
  engine = AtomicStyleEngine(prefix="x-")
  assert engine.inject_style([{"color": "red"}]) == "x-a"
  assert engine.get_style_sheet() == ".x-a{color:red}"


def test_empty_stack() -> None:
  engine = AtomicStyleEngine()
  assert engine.inject_style([]) == ""
  assert engine.get_style_sheet() == ""


def test_unsupported_nested_key_is_skipped_with_warning(caplog) -> None:
  engine = AtomicStyleEngine()
  assert engine.inject_style([{"color": "red", "nested": {"margin": 4}}]) == "a"
  assert engine.get_style_sheet() == ".a{color:red}"
  assert "Ignoring nested styles under unsupported key 'nested'" in caplog.text
