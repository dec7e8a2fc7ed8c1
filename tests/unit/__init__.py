"""
Unit Tests - Testing Individual Components in Isolation.

Test Files:
    - test_sync_middleware.py / test_void_middleware.py: sync algebra
    - test_async_middleware.py: async and task algebra
    - test_invocation_context.py / test_invoke.py: invocation bridge
    - test_interceptor.py / test_logging_interceptor.py: interception
    - test_resilience.py / test_middleware_registry.py: pluggable middlewares
    - test_config_loader.py: Configuration loading/validation
"""
