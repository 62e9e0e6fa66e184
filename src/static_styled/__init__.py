"""
static-styled Package.

A build-time transform extracting styled-component declarations from Python
UI code into precomputed, atomic CSS class names.

This package exposes the extraction engine and configuration utilities for
programmatic usage.

Usage
-----

Simple String Extraction
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import static_styled as ss
    code = 'Box = styled.div({"color": "red"})\\nview = Box(css={"fontSize": 12})\\n'
    print(ss.extract(code))
    # view = html.div(className="a b")

Advanced Usage (Extraction Engine)
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from static_styled import ExtractionEngine, RuntimeConfig, AtomicStyleEngine

    styles = AtomicStyleEngine()
    engine = ExtractionEngine(config=RuntimeConfig(all_static=True), style_engine=styles)
    res = engine.run(code, filename="views.py")

    for diagnostic in res.diagnostics:
        print(diagnostic.severity, diagnostic.message)
    print(styles.get_style_sheet())
"""

from typing import Optional

from static_styled.config import RuntimeConfig
from static_styled.core.diagnostics import Diagnostic, DiagnosticsReporter
from static_styled.core.engine import ExtractionEngine
from static_styled.core.result import ExtractionResult, RewriteRecord
from static_styled.style import AtomicStyleEngine, StyleEngine

__version__ = "0.1.0"


def extract(
  code: str,
  filename: str = "<string>",
  config: Optional[RuntimeConfig] = None,
  style_engine: Optional[StyleEngine] = None,
  reporter: Optional[DiagnosticsReporter] = None,
) -> str:
  """
  Extracts static styles from a string of Python code.

  This is a high-level convenience wrapper around the `ExtractionEngine`. For
  file-based or batch processing, consider using `static_styled.cli` or the
  engine directly.

  Args:
      code (str): The source code to transform.
      filename (str): Path reported in diagnostics.
      config (RuntimeConfig, optional): Configuration. Defaults are used if None.
      style_engine (StyleEngine, optional): Collaborator producing class names.
      reporter (Callable, optional): Sink receiving each diagnostic.

  Returns:
      str: The transformed source code.

  Raises:
      ValueError: If the code cannot be parsed.
  """
  engine = ExtractionEngine(config=config or RuntimeConfig(), style_engine=style_engine, reporter=reporter)
  result = engine.run(code, filename=filename)

  if not result.success:
    error_msg = "\n".join(result.errors)
    raise ValueError(f"Extraction failed:\n{error_msg}")

  return result.code


__all__ = [
  "AtomicStyleEngine",
  "Diagnostic",
  "ExtractionEngine",
  "ExtractionResult",
  "RewriteRecord",
  "RuntimeConfig",
  "StyleEngine",
  "extract",
  "__version__",
]
