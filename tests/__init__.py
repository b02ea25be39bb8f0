"""
zkbridge Test Suite
===================

Test organization:
- tests/unit/          - Unit tests (no external dependencies)

External tools (snarkjs, chain clients) are replaced by stand-ins; no test
needs node or network access.

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest --cov=zkbridge           # With coverage
"""
