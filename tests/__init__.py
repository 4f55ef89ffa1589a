"""
Test suite for the Fleet host filters tool.

This package contains tests for:
- Filter state parsing and the exclusive filter reconciler
- Navigation, bulk-action eligibility and profile helpers
- Fleet API wrappers and the hosts query cache with mocked responses
- CLI operations and output strategies
"""
