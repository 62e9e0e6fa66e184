"""
Core Package.

Contains the extraction backend:
- Semantic program view and constant evaluator
- Directives and diagnostics
- Rewriter passes and the pass coordinator
- Extraction engine and result models
"""
