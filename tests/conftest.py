"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A recording style engine capturing every injected stack.
- An `extract` fixture running the engine over dedented source.
"""

import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pytest

# Add src to path so we can import 'static_styled' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from static_styled.config import RuntimeConfig  # noqa: E402
from static_styled.core.engine import ExtractionEngine  # noqa: E402
from static_styled.core.result import ExtractionResult  # noqa: E402
from static_styled.style.base import StyleEngine  # noqa: E402


class RecordingStyleEngine(StyleEngine):
  """
  Deterministic style engine returning ``c1``, ``c2``... per call.
  """

  def __init__(self) -> None:
    self.calls: List[List[Dict[str, Any]]] = []

  def inject_style(self, stack: Sequence[Dict[str, Any]]) -> str:
    self.calls.append([dict(style) for style in stack])
    return f"c{len(self.calls)}"


@pytest.fixture
def style_engine() -> RecordingStyleEngine:
  return RecordingStyleEngine()


@pytest.fixture
def extract(style_engine):
  """
  Runs the engine over dedented code with optional config overrides.
  """

  def _run(code: str, **overrides: Any) -> ExtractionResult:
    config = RuntimeConfig(**overrides)
    engine = ExtractionEngine(config=config, style_engine=style_engine)
    return engine.run(textwrap.dedent(code).lstrip("\n"), filename="view.py")

  return _run
