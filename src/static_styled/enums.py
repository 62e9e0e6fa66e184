"""
Enumerations for static-styled.

This module defines the standard enumerations shared by the analysis,
rewriting and reporting layers.
"""

from enum import Enum


class Severity(str, Enum):
  """
  Graded severity of a reported diagnostic.

  Whether an ``ERROR`` fails a build is decided by the consumer of the
  diagnostics (e.g. the CLI), never by the transform itself.
  """

  ERROR = "error"
  WARNING = "warning"
  INFO = "info"


class PassPhase(str, Enum):
  """
  States of the pass coordinator.
  """

  COLLECT = "collect"
  REWRITE = "rewrite"
  REWRITE_AGAIN = "rewrite_again"  # Bounded re-run, at most once
  DONE = "done"


class ReferenceKind(str, Enum):
  """
  Classification of a name occurrence that resolves to a styled component.
  """

  DECLARATOR = "declarator"  # Box = ...
  MARKUP = "markup"  # Box(...)
  COMPOSITION = "composition"  # styled(Box, {...})
  VALUE = "value"  # anything else, e.g. render(Box)


class Directive(str, Enum):
  """
  Source-embedded directives, written as ``# @<namespace>-<tag>`` comments.
  """

  ALL_DYNAMIC = "all-dynamic"  # File level: skip the transform
  ALL_STATIC = "all-static"  # File level: escalate every fallback to error
  STATIC = "static"  # Declaration level: escalate this declaration
  DYNAMIC = "dynamic"  # Statement level: exempt the subtree
