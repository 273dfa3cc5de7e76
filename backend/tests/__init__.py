"""
Test Suite

Tests for the HR Workflow Tracker backend.

Structure:
    tests/
    ├── conftest.py         # Repository, engine and service fixtures
    ├── fakes.py            # In-memory pymongo collection
    ├── factories.py        # Workflow/template/task builders
    ├── test_*.py           # Engine, service and repository tests
    └── test_api.py         # HTTP endpoints through TestClient

To run tests (from the repository root):
    pytest
"""
