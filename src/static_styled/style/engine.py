"""
Atomic Style Engine.

Default `StyleEngine` emitting one class per declaration:

1.  **Merging**: the stack is merged left to right, later entries winning.
    Nested selector (``":hover"``) and ``"@media ..."`` mappings merge
    recursively.
2.  **Atomization**: each (media, selector, property, value) tuple maps to a
    single short class name, shared by every stack that uses it.
3.  **Formatting**: camelCase properties become kebab-case, numbers get a
    ``px`` unit unless the property is unitless or the value is zero, lists
    become fallback declarations and ``None`` values are skipped.

The accumulated rules are rendered by `get_style_sheet`.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from static_styled.style.base import StyleEngine
from static_styled.style.hashing import HashCounter
from static_styled.utils.console import log_warning

UNITLESS_PROPERTIES = frozenset(
  {
    "animation-iteration-count",
    "border-image-outset",
    "border-image-slice",
    "border-image-width",
    "column-count",
    "fill-opacity",
    "flex",
    "flex-grow",
    "flex-shrink",
    "font-weight",
    "grid-column",
    "grid-row",
    "line-clamp",
    "line-height",
    "opacity",
    "order",
    "orphans",
    "stroke-opacity",
    "tab-size",
    "widows",
    "z-index",
    "zoom",
  }
)

_UPPER = re.compile(r"[A-Z]")

RuleKey = Tuple[str, str, str, Tuple[str, ...]]


def hyphenate(prop: str) -> str:
  """
  Converts a camelCase property to CSS kebab-case (``msFlex`` -> ``-ms-flex``).
  """
  result = _UPPER.sub(lambda m: "-" + m.group(0).lower(), prop)
  if result.startswith("ms-"):
    result = "-" + result
  return result


def format_value(prop: str, value: Any) -> str:
  """
  Renders a primitive as a CSS value for a (hyphenated) property.
  """
  if isinstance(value, bool):
    return str(value).lower()
  if isinstance(value, (int, float)):
    if value == 0 or prop in UNITLESS_PROPERTIES:
      return str(value)
    return f"{value}px"
  return str(value)


def merge_styles(stack: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
  """
  Merges a style stack, later entries overriding earlier ones.

  Args:
      stack: Ordered style mappings.

  Returns:
      Dict[str, Any]: A new merged mapping.
  """
  merged: Dict[str, Any] = {}
  for style in stack:
    for key, value in style.items():
      existing = merged.get(key)
      if isinstance(value, dict) and isinstance(existing, dict):
        merged[key] = merge_styles([existing, value])
      elif isinstance(value, dict):
        merged[key] = merge_styles([value])
      else:
        merged[key] = value
  return merged


class AtomicStyleEngine(StyleEngine):
  """
  Accumulates atomic CSS rules across every stack it is asked to inject.
  """

  def __init__(self, prefix: str = "") -> None:
    """
    Args:
        prefix: Prepended to every generated class name.
    """
    self._hasher = HashCounter(prefix)
    self._classes: Dict[RuleKey, str] = {}
    # media query ("" for none) -> rendered rules in insertion order
    self._rules: Dict[str, List[str]] = {"": []}

  def inject_style(self, stack: Sequence[Dict[str, Any]]) -> str:
    """
    Registers the merged declarations of a stack.

    Args:
        stack: Ordered style mappings.

    Returns:
        str: Space-separated atomic class names.
    """
    names: List[str] = []
    self._inject(merge_styles(stack), "", "", names)
    return " ".join(names)

  def _inject(self, style: Dict[str, Any], media: str, selector: str, names: List[str]) -> None:
    for key, value in style.items():
      if isinstance(value, dict):
        if key.startswith("@media"):
          nested_media = key if not media else f"{media} and {key[len('@media'):].strip()}"
          self._inject(value, nested_media, selector, names)
        elif key.startswith((":", "[")):
          self._inject(value, media, selector + key, names)
        else:
          log_warning(f"Ignoring nested styles under unsupported key {key!r}")
        continue

      prop = hyphenate(key)
      values = value if isinstance(value, list) else [value]
      rendered = tuple(format_value(prop, v) for v in values if v is not None and not isinstance(v, (dict, list)))
      if not rendered:
        continue
      names.append(self._class_for((media, selector, prop, rendered)))

  def _class_for(self, key: RuleKey) -> str:
    name = self._classes.get(key)
    if name is not None:
      return name

    media, selector, prop, values = key
    name = self._hasher()
    self._classes[key] = name
    body = ";".join(f"{prop}:{v}" for v in values)
    self._rules.setdefault(media, []).append(f".{name}{selector}{{{body}}}")
    return name

  def get_style_sheet(self, media: Optional[str] = None) -> str:
    """
    Renders accumulated rules.

    Args:
        media: Restrict output to one media query ("" for plain rules).

    Returns:
        str: CSS text, plain rules first then one block per media query.
    """
    blocks: List[str] = []
    for query, rules in self._rules.items():
      if media is not None and query != media:
        continue
      if not rules:
        continue
      text = "".join(rules)
      blocks.append(f"{query}{{{text}}}" if query else text)
    return "".join(blocks)
