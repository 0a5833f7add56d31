"""
Test suite for Nut Catalog Sync.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_reconciler_service.py -v
"""
