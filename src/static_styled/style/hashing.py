"""
Short class-name generation.
"""

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
  """
  Formats a non-negative integer in base 36 using lowercase letters.
  """
  if value == 0:
    return "0"
  chars = []
  while value:
    value, rem = divmod(value, 36)
    chars.append(_DIGITS[rem])
  return "".join(reversed(chars))


class HashCounter:
  """
  Sequential generator of short identifiers (``a``, ``b``, ... ``z``, ``a0``).

  Names that start with a digit are not valid CSS class selectors, and names
  starting with ``ad`` are commonly hidden by ad blockers; both are skipped.
  """

  def __init__(self, prefix: str = "") -> None:
    self.prefix = prefix
    self._index = 0

  def __call__(self) -> str:
    while True:
      name = to_base36(self._index)
      self._index += 1
      if name[0].isdigit() or name.startswith("ad"):
        continue
      return self.prefix + name
