"""
Unit tests for the retry engine.

Test individual components in isolation:
- Options (defaults, strict keys, merge without leaking)
- Failure matching (class coverage, message pattern)
- Backoff strategies
- Nesting guard
- Retry loop (attempt counting, logging hooks, metadata)
- Mixin and module-level API
"""
