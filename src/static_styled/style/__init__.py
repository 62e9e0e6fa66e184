"""
Style Injection Package.

Turns ordered stacks of folded style mappings into class names.

Modules:
    - ``base``: The `StyleEngine` contract used by the usage rewriter.
    - ``hashing``: Short class-name generation.
    - ``engine``: `AtomicStyleEngine`, the default atomic CSS implementation.
"""

from static_styled.style.base import StyleEngine
from static_styled.style.engine import AtomicStyleEngine
from static_styled.style.hashing import HashCounter

__all__ = ["StyleEngine", "AtomicStyleEngine", "HashCounter"]
