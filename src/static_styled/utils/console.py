"""
Central Logging and Console Utilities.

This module routes the application's output through the Python standard
`logging` library, backed by `rich` for formatting.

It serves two purposes:
1.  **Standard Logging Integration**: Provides a configured root handler and
    adapter functions (`log_success`, `log_warning`) that route to standard logging channels.
2.  **Console Injection**: Implements a Proxy around the Rich Console so the
    output destination (stdout or an in-memory buffer in tests) can be swapped
    at runtime via `set_console`.

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.theme import Theme

from static_styled.core.diagnostics import Diagnostic
from static_styled.enums import Severity

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "code": "bold magenta",
  }
)

_SEVERITY_STYLES = {
  Severity.ERROR: "error",
  Severity.WARNING: "warning",
  Severity.INFO: "info",
}


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  All printing is forwarded to the backend Console. When the backend changes,
  the proxy also reconfigures the `logging` handlers so `logging.info(...)`
  writes to the new destination.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    """Initializes the proxy with a default Standard Output console."""
    self._backend: Console = Console(theme=_THEME)
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Resets the proxy to use a fresh standard output console."""
    self._backend = Console(theme=_THEME)
    self._configure_logging()

  @property
  def backend(self) -> Console:
    """
    Access the raw backend console.

    Returns:
        Console: The currently active implementation.
    """
    return self._backend

  def _configure_logging(self) -> None:
    """
    Directs the root logger to the current backend console.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )

    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    """
    Forwards `print` calls to the active backend.

    Args:
        *args: Positional arguments for Rich print.
        **kwargs: Keyword arguments for Rich print.
    """
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    """Forwards any other attribute to the backend."""
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Global helper to inject a specific console instance.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Global helper to reset logging and console to standard output."""
  console.reset()


def log_info(msg: str) -> None:
  """
  Logs an informational message via standard logging.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  """
  Logs a success message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})


def log_diagnostic(diagnostic: Diagnostic) -> None:
  """
  Renders a transform diagnostic through the logging channel matching its severity.

  Source excerpts are escaped so brackets in user code are not read as markup.

  Args:
      diagnostic (Diagnostic): The diagnostic to render.
  """
  style = _SEVERITY_STYLES[diagnostic.severity]
  location = f"[path]{escape(diagnostic.file)}:{diagnostic.line}[/path]"
  text = f"{location} [{style}]{escape(diagnostic.message)}[/{style}]"
  if diagnostic.source:
    text += f"\n    [code]{escape(diagnostic.source)}[/code]"

  if diagnostic.inner_diagnostic:
    inner = diagnostic.inner_diagnostic
    text += f"\n    ↳ {escape(inner.message)} (line {inner.line}: [code]{escape(inner.source)}[/code])"

  if diagnostic.severity == Severity.ERROR:
    log_error(text)
  elif diagnostic.severity == Severity.WARNING:
    log_warning(text)
  else:
    log_info(text)
