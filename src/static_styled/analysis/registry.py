"""
Symbol Registry.

Per-file bookkeeping shared by every pass of one extraction run:

*   ``symbol_to_component``: binding -> registered `StaticStyledComponent`.
*   ``symbols_with_references_outside_markup``: binding -> escape record.
    Once a record has been reported it is never reported again.
*   ``extended_component_symbols``: bindings passed as the first argument of a
    composition call.
*   ``compositions``: parent binding -> child declarations composing it
    (``None`` for compositions that are not registered declarations).
*   ``retained``: bindings whose declaration must survive because code that
    is kept at runtime still references them.

A registry is allocated fresh per file and never merged across files.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from static_styled.core.evaluator import EvaluatedStyle
from static_styled.core.program import BindingId


@dataclass(frozen=True)
class StaticStyledComponent:
  """
  Snapshot of a component whose styles were folded at build time.
  """

  component_name: str
  element_name: str
  styles: Tuple[EvaluatedStyle, ...]
  binding: BindingId
  parent: Optional[BindingId] = None
  require_static: bool = False


@dataclass(frozen=True)
class ReferenceSite:
  """
  Location of a reference, stable across passes.
  """

  line: int
  column: int
  source: str


@dataclass
class OutsideReferences:
  """
  Escape record of a component used outside markup.
  """

  component: StaticStyledComponent
  references: List[ReferenceSite] = field(default_factory=list)
  has_been_reported: bool = False


class SymbolRegistry:
  """
  Registry of statically extractable components for one file.
  """

  def __init__(self) -> None:
    self.symbol_to_component: Dict[BindingId, StaticStyledComponent] = {}
    self.symbols_with_references_outside_markup: Dict[BindingId, OutsideReferences] = {}
    self.extended_component_symbols: Set[BindingId] = set()
    self.compositions: Dict[BindingId, List[Optional[BindingId]]] = {}
    self.retained: Set[BindingId] = set()

  # --- Components ---

  def register(self, component: StaticStyledComponent) -> None:
    """
    Registers a component. The first registration of a binding wins.

    Args:
        component: The folded component.
    """
    self.symbol_to_component.setdefault(component.binding, component)

  def get(self, binding: Optional[BindingId]) -> Optional[StaticStyledComponent]:
    """
    Looks up a registered component.
    """
    if binding is None:
      return None
    return self.symbol_to_component.get(binding)

  def is_registered(self, binding: Optional[BindingId]) -> bool:
    return binding is not None and binding in self.symbol_to_component

  # --- Escapes ---

  def record_outside_reference(self, binding: BindingId, site: ReferenceSite) -> bool:
    """
    Records a reference to a registered component outside markup.

    Args:
        binding: The referenced component binding.
        site: Location of the reference.

    Returns:
        bool: True if the site was not known yet.
    """
    component = self.symbol_to_component[binding]
    record = self.symbols_with_references_outside_markup.setdefault(binding, OutsideReferences(component))
    if site in record.references:
      return False
    record.references.append(site)
    return True

  def is_escaped(self, binding: Optional[BindingId]) -> bool:
    return binding is not None and binding in self.symbols_with_references_outside_markup

  def unreported_escapes(self) -> List[Tuple[BindingId, OutsideReferences]]:
    """
    Returns escape records that have not been reported yet, in discovery order.
    """
    return [(b, r) for b, r in self.symbols_with_references_outside_markup.items() if not r.has_been_reported]

  # --- Composition & Retention ---

  def mark_extended(self, binding: BindingId) -> None:
    self.extended_component_symbols.add(binding)

  def record_composition(self, parent: BindingId, child: Optional[BindingId]) -> None:
    """
    Links a parent component to a declaration composing it.

    Args:
        parent: The extended component.
        child: The composing declaration, or None if it is not registered.
    """
    children = self.compositions.setdefault(parent, [])
    if child not in children:
      children.append(child)

  def retain(self, binding: Optional[BindingId]) -> None:
    """
    Marks a binding whose declaration must stay in the output.
    """
    if binding is not None:
      self.retained.add(binding)

  def is_droppable(self, binding: BindingId) -> bool:
    """
    Decides whether a declaration can be removed from the output.

    A declaration is droppable when it is registered, has no reference
    outside markup, is not retained, and every declaration composing it is
    droppable as well.

    Args:
        binding: The declaration binding.

    Returns:
        bool: True if no surviving code references the declaration.
    """
    return self._is_droppable(binding, set())

  def _is_droppable(self, binding: BindingId, visiting: Set[BindingId]) -> bool:
    if binding in visiting:
      return False
    if not self.is_registered(binding) or self.is_escaped(binding) or binding in self.retained:
      return False

    visiting.add(binding)
    try:
      for child in self.compositions.get(binding, []):
        if child is None or not self._is_droppable(child, visiting):
          return False
    finally:
      visiting.discard(binding)
    return True
