"""
Directive Comments.

Directives are written as comments carrying a marker token, for example::

    # @styled-all-static
    Box = styled.div({"color": "red"})  # @styled-static

File-level markers (``all-dynamic``, ``all-static``) may appear in the module
header, the footer, or attached to any top-level statement. Statement-level
markers (``static``, ``dynamic``) are read from the comment lines directly
above a statement, its trailing comment, and the header comment of a
compound statement.
"""

from typing import Iterator, List, Set

import libcst as cst

from static_styled.config import RuntimeConfig
from static_styled.enums import Directive


def _empty_line_comments(lines: List[cst.EmptyLine]) -> Iterator[str]:
  for line in lines:
    if line.comment is not None:
      yield line.comment.value


def statement_comments(stmt: cst.CSTNode) -> List[str]:
  """
  Collects the comments attached to a statement.

  Args:
      stmt: A simple or compound statement.

  Returns:
      List[str]: Raw comment texts including the leading ``#``.
  """
  comments: List[str] = []
  comments.extend(_empty_line_comments(getattr(stmt, "leading_lines", ())))
  comments.extend(_empty_line_comments(getattr(stmt, "lines_after_decorators", ())))

  for decorator in getattr(stmt, "decorators", ()):
    comments.extend(_empty_line_comments(decorator.leading_lines))

  trailing = getattr(stmt, "trailing_whitespace", None)
  if isinstance(trailing, cst.TrailingWhitespace) and trailing.comment is not None:
    comments.append(trailing.comment.value)

  body = getattr(stmt, "body", None)
  if isinstance(body, cst.IndentedBlock) and body.header.comment is not None:
    comments.append(body.header.comment.value)
  elif isinstance(body, cst.SimpleStatementSuite) and body.trailing_whitespace.comment is not None:
    comments.append(body.trailing_whitespace.comment.value)

  return comments


class DirectiveIndex:
  """
  Resolves directive markers for one file.

  Attributes:
      file_all_dynamic (bool): The whole file opts out of the transform.
      file_all_static (bool): Every fallback in the file is escalated to error.
  """

  def __init__(self, module: cst.Module, config: RuntimeConfig) -> None:
    """
    Scans the module for file-level directives.

    Args:
        module: The parsed source.
        config: Provides the directive namespace and the global all-static flag.
    """
    self._markers = {d: config.directive_tag(d.value) for d in Directive}

    file_comments: List[str] = []
    file_comments.extend(_empty_line_comments(module.header))
    file_comments.extend(_empty_line_comments(module.footer))
    for stmt in module.body:
      file_comments.extend(statement_comments(stmt))

    found = self._directives_in(file_comments)
    self.file_all_dynamic = Directive.ALL_DYNAMIC in found
    self.file_all_static = Directive.ALL_STATIC in found or config.all_static

  def _directives_in(self, comments: List[str]) -> Set[Directive]:
    tokens: Set[str] = set()
    for comment in comments:
      tokens.update(comment.lstrip("#").split())
    return {d for d, marker in self._markers.items() if marker in tokens}

  def directives_of(self, stmt: cst.CSTNode) -> Set[Directive]:
    """
    Returns the directives attached to a single statement.
    """
    return self._directives_in(statement_comments(stmt))

  def is_static(self, stmt: cst.CSTNode) -> bool:
    """
    Checks whether a declaration demands static extraction.

    Args:
        stmt: The declaring statement.

    Returns:
        bool: True if the statement carries ``static`` or the file is all-static.
    """
    return self.file_all_static or Directive.STATIC in self.directives_of(stmt)

  def is_dynamic(self, stmt: cst.CSTNode) -> bool:
    """
    Checks whether a statement's subtree is exempt from rewriting.
    """
    return Directive.DYNAMIC in self.directives_of(stmt)
