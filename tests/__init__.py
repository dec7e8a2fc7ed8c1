"""
Test Suite for Middleware Pipeline.

Test organization:
    - unit/: One module per component
    - integration/: Pipelines built from config, intercepted services
    - fixtures/: Sample configuration and profiles

Running Tests:
    pytest tests/                           # All tests
    pytest tests/unit/                      # Unit tests only
    pytest tests/integration/               # Integration tests only
"""
