"""Unit tests for BOQCalc web route modules.

Each route module has a corresponding test file.

Structure:
    tests/unit/web/
    ├── test_dependencies.py         # Dependency providers
    ├── test_routes_boq.py           # BOQ and supplier routes
    └── test_routes_quotations.py    # Quotation routes

Testing pattern:
    - Use FastAPI's TestClient for route testing
    - Replace repositories/services via app.dependency_overrides
    - Test request/response validation
    - Test error-to-status mapping
"""
