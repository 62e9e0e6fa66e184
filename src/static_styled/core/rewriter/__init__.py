"""
Rewriter Package.

Contains the per-file transform:
- ``context``: Shared state of one extraction run.
- ``interface``: The `RewriterPass` contract.
- ``passes``: Collection and rewrite traversals.
- ``usages``: Markup usage planning and replacement.
- ``pipeline``: The pass coordinator state machine.
"""
