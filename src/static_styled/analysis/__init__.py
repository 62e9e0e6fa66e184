"""
Static Analysis Package.

Analyzers deciding what the rewriter may touch.

Modules:
    - ``registry``: Per-file symbol registry of extractable components.
    - ``declarations``: Folding component declarations into the registry.
    - ``safety``: Reference classification and usage gating.
"""
