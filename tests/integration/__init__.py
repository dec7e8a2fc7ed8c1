"""
Integration Tests - Components Working Together.

Test Files:
    - test_pipeline_with_registry.py: shipped config -> registry -> pipeline
    - test_intercepted_service.py: interceptor, logging and bridge middlewares
"""
