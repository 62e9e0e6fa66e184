"""
Semantic layer over a parsed source file.

`SourceProgram` wraps a LibCST module with the metadata the transform needs:

1.  **Binding identity** (`resolve_binding`): maps a name occurrence to the
    stable identity of its declaration using libcst scope analysis.
2.  **Parents**: upward navigation for the safety analysis.
3.  **Positions and source text**: locations for diagnostics.
4.  **Exports**: names listed in a literal module-level ``__all__``.

Binding identities are derived from the position of the defining node, so
they stay stable across passes that re-parse metadata over an unchanged tree.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Set

import libcst as cst
from libcst.metadata import (
  Access,
  Assignment,
  MetadataWrapper,
  ParentNodeProvider,
  PositionProvider,
  Scope,
  ScopeProvider,
)


@dataclass(frozen=True)
class BindingId:
  """
  The resolved, unique identity of a declared name within one file.
  """

  name: str
  line: int
  column: int

  def __str__(self) -> str:
    return f"{self.name}@{self.line}:{self.column}"


class SourceProgram:
  """
  Metadata-backed view of one file, created fresh for every pass.

  Attributes:
      module (cst.Module): The tree the metadata was computed for. Visitors must
          traverse this instance (not the module passed in) for node lookups to work.
      filename (str): Path reported in diagnostics.
  """

  def __init__(self, module: cst.Module, filename: str = "<string>") -> None:
    """
    Computes scope, parent and position metadata for the module.

    Args:
        module: The parsed source.
        filename: Path reported in diagnostics.
    """
    wrapper = MetadataWrapper(module)
    self.module = wrapper.module
    self.filename = filename

    scopes: Mapping[cst.CSTNode, Optional[Scope]] = wrapper.resolve(ScopeProvider)
    self._parents: Mapping[cst.CSTNode, cst.CSTNode] = wrapper.resolve(ParentNodeProvider)
    self._positions = wrapper.resolve(PositionProvider)

    self._assignment_by_node: Dict[cst.CSTNode, Assignment] = {}
    self._access_by_node: Dict[cst.CSTNode, Access] = {}
    self._assignment_by_binding: Dict[BindingId, Assignment] = {}

    for scope in {s for s in scopes.values() if s is not None}:
      for assignment in scope.assignments:
        if isinstance(assignment, Assignment):
          self._assignment_by_node[assignment.node] = assignment
          self._assignment_by_binding[self._binding_for(assignment)] = assignment
      for access in scope.accesses:
        if isinstance(access.node, cst.Name):
          self._access_by_node[access.node] = access

    self.exported_names: Set[str] = self._collect_exports()

  # --- Binding Resolution ---

  def _binding_for(self, assignment: Assignment) -> BindingId:
    """Derives the identity of an assignment from its defining node."""
    pos = self._positions[assignment.node].start
    return BindingId(assignment.name, pos.line, pos.column)

  def resolve_binding(self, node: cst.CSTNode) -> Optional[BindingId]:
    """
    Maps a name occurrence (or a definition node) to its binding.

    Args:
        node: A ``Name`` being read or assigned, or a ``FunctionDef``/``ClassDef``.

    Returns:
        Optional[BindingId]: The binding, or None when the name is unresolved,
        builtin, or refers to more than one assignment.
    """
    assignment = self._assignment_by_node.get(node)
    if assignment is not None:
      return self._binding_for(assignment)

    access = self._access_by_node.get(node)
    if access is None:
      return None

    referents = [r for r in access.referents if isinstance(r, Assignment)]
    if len(referents) != 1 or len(access.referents) != 1:
      return None
    return self._binding_for(referents[0])

  def is_single_assignment(self, binding: BindingId) -> bool:
    """
    Checks that the binding's name is assigned exactly once in its scope.

    Args:
        binding: The binding to check.

    Returns:
        bool: True if no other statement rebinds the name.
    """
    assignment = self._assignment_by_binding.get(binding)
    if assignment is None:
      return False
    return len(assignment.scope.assignments[assignment.name]) == 1

  def definition_of(self, binding: BindingId) -> Optional[cst.CSTNode]:
    """
    Returns the node that introduced a binding.

    For ``x = value`` this is the assigned expression, for ``def``/``class``
    it is the definition itself. Other binding forms (imports, loop targets,
    parameters) yield None.

    Args:
        binding: The binding to look up.

    Returns:
        Optional[cst.CSTNode]: The defining value node.
    """
    assignment = self._assignment_by_binding.get(binding)
    if assignment is None:
      return None

    node = assignment.node
    if isinstance(node, (cst.FunctionDef, cst.ClassDef)):
      return node

    parent = self._parents.get(node)
    if isinstance(parent, cst.AssignTarget):
      assign = self._parents.get(parent)
      if isinstance(assign, cst.Assign) and len(assign.targets) == 1:
        return assign.value
    if isinstance(parent, cst.AnnAssign) and parent.target is node:
      return parent.value
    return None

  # --- Navigation ---

  def parent(self, node: cst.CSTNode) -> Optional[cst.CSTNode]:
    """
    Returns the parent of a node, or None for the module.
    """
    return self._parents.get(node)

  def statement_of(self, node: cst.CSTNode) -> cst.CSTNode:
    """
    Walks up to the innermost statement containing the node.

    Args:
        node: Any node of this module.

    Returns:
        cst.CSTNode: The enclosing statement, or the node itself at module level.
    """
    current: Optional[cst.CSTNode] = node
    while current is not None:
      if isinstance(current, cst.BaseStatement):
        return current
      current = self._parents.get(current)
    return node

  # --- Locations ---

  def line_of(self, node: cst.CSTNode) -> int:
    """
    Returns the 1-based line a node starts on (0 if unknown).
    """
    code_range = self._positions.get(node)
    return code_range.start.line if code_range else 0

  def column_of(self, node: cst.CSTNode) -> int:
    """
    Returns the 0-based column a node starts on (0 if unknown).
    """
    code_range = self._positions.get(node)
    return code_range.start.column if code_range else 0

  def source_of(self, node: cst.CSTNode) -> str:
    """
    Returns the source text of a node without surrounding blank lines.
    """
    return self.module.code_for_node(node).strip()

  # --- Exports ---

  def _collect_exports(self) -> Set[str]:
    """Reads string entries of literal ``__all__`` assignments at module level."""
    exported: Set[str] = set()
    for stmt in self.module.body:
      if not isinstance(stmt, cst.SimpleStatementLine):
        continue
      for small in stmt.body:
        value: Optional[cst.BaseExpression] = None
        if isinstance(small, cst.Assign) and any(
          isinstance(t.target, cst.Name) and t.target.value == "__all__" for t in small.targets
        ):
          value = small.value
        elif isinstance(small, (cst.AugAssign, cst.AnnAssign)):
          if isinstance(small.target, cst.Name) and small.target.value == "__all__":
            value = small.value
        if isinstance(value, (cst.List, cst.Tuple, cst.Set)):
          for element in value.elements:
            if isinstance(element.value, cst.SimpleString):
              text = element.value.evaluated_value
              if isinstance(text, str):
                exported.add(text)
    return exported
