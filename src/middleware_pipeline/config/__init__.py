"""
Configuration Package - Models and Loaders.

    - Pydantic models for type-safe configuration
    - YAML loader with profile overlays

Configuration Structure:
    - PipelineConfig: Root configuration object
    - RetryConfig / CircuitBreakerConfig / TimeoutConfig: resilience middlewares
    - InterceptionConfig / LoggingInterceptorOptions: interceptors
    - RegistryConfig: enabled middlewares, in order
"""

from middleware_pipeline.config.loader import ConfigLoader, load_config, merge_configs
from middleware_pipeline.config.models import (
    CircuitBreakerConfig,
    InterceptionConfig,
    LoggingInterceptorOptions,
    PipelineConfig,
    RegistryConfig,
    RetryConfig,
    TimeoutConfig,
)

__all__ = [
    "CircuitBreakerConfig",
    "ConfigLoader",
    "InterceptionConfig",
    "LoggingInterceptorOptions",
    "PipelineConfig",
    "RegistryConfig",
    "RetryConfig",
    "TimeoutConfig",
    "load_config",
    "merge_configs",
]
