"""
Integration tests for the retry engine.

Test components together through the public surface:
- Host objects mixing in Retryable against a flaky dependency
- Task logging to stderr
- structlog configuration
"""
