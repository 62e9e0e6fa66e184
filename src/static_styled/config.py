"""
Runtime Configuration Store.

Holds the names the transform recognizes in source files (the styling
primitive, the reserved ``css`` keyword, the emitted class keyword) and the
escalation settings. Values are resolved from ``[tool.static_styled]`` in the
nearest ``pyproject.toml`` and overridden by explicit arguments.
"""

import keyword
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the extraction engine.
  """

  primitive_name: str = Field("styled", description="Name of the styling primitive (e.g. 'styled').")
  element_namespace: str = Field("html", description="Namespace emitted for plain elements (e.g. 'html.div').")
  css_attribute: str = Field("css", description="Reserved keyword carrying an inline style descriptor.")
  class_attribute: str = Field("className", description="Keyword appended to rewritten elements.")
  directive_namespace: str = Field("styled", description="Prefix of directive comments ('# @styled-static').")
  all_static: bool = Field(False, description="If True, every fallback is reported as an error.")
  class_prefix: str = Field("", description="Prefix prepended to generated class names.")
  max_evaluation_depth: int = Field(32, ge=1, description="Recursion limit of the constant evaluator.")

  @field_validator("primitive_name", "element_namespace", "css_attribute", "class_attribute")
  @classmethod
  def validate_identifier(cls, v: str) -> str:
    """
    Ensures the configured name can appear in Python source as an identifier.

    Args:
        v (str): The configured name.

    Returns:
        str: The stripped name.

    Raises:
        ValueError: If the name is not a valid, non-reserved identifier.
    """
    v_clean = v.strip()
    if not v_clean.isidentifier() or keyword.iskeyword(v_clean):
      raise ValueError(f"'{v}' is not a valid Python identifier")
    return v_clean

  @field_validator("directive_namespace")
  @classmethod
  def validate_namespace(cls, v: str) -> str:
    """
    Ensures the directive namespace is usable inside a comment tag.

    Args:
        v (str): The namespace.

    Returns:
        str: The normalized (lowercase) namespace.

    Raises:
        ValueError: If the namespace is empty or contains whitespace.
    """
    v_clean = v.strip().lower()
    if not v_clean or any(ch.isspace() for ch in v_clean):
      raise ValueError(f"Invalid directive namespace: '{v}'")
    return v_clean

  def directive_tag(self, tag: str) -> str:
    """
    Builds the full directive marker for a tag.

    Args:
        tag (str): The directive tag (e.g. 'static').

    Returns:
        str: The marker searched in comments (e.g. '@styled-static').
    """
    return f"@{self.directive_namespace}-{tag}"

  @classmethod
  def load(
    cls,
    all_static: Optional[bool] = None,
    overrides: Optional[Dict[str, Any]] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        all_static (Optional[bool]): Override for the all-static escalation.
        overrides (Optional[Dict]): Additional field overrides (e.g. from ``--config``).
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    settings: Dict[str, Any] = {k: v for k, v in toml_config.items() if k in cls.model_fields}
    settings.update(overrides or {})

    if all_static is not None:
      settings["all_static"] = all_static

    return cls(**settings)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)

        tool_section = data.get("tool", {})
        return tool_section.get("static_styled", {}), parent
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

  return {}, None


def parse_cli_key_values(items: Optional[List[str]]) -> Dict[str, Any]:
  """
  Parses a list of 'key=value' strings into a dictionary.

  Types are inferred (int, bool, or string).

  Args:
      items (Optional[List[str]]): List of raw CLI strings directly from argparse.

  Returns:
      Dict[str, Any]: Parsed dictionary.

  Raises:
      ValueError: If an item does not contain '='.
  """
  if not items:
    return {}

  config: Dict[str, Any] = {}
  for item in items:
    if "=" not in item:
      raise ValueError(f"Invalid config format: '{item}'. Expected 'key=value'.")

    key, val_str = item.split("=", 1)
    key = key.strip()
    val_str = val_str.strip()

    final_val: Any = val_str

    if val_str.lower() == "true":
      final_val = True
    elif val_str.lower() == "false":
      final_val = False
    else:
      try:
        final_val = int(val_str)
      except ValueError:
        pass

    config[key] = final_val

  return config
