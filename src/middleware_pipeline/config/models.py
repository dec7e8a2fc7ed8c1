"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RetryConfig(BaseModel):
    """Configuration for retry middlewares."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=1.0, ge=0)
    max_delay_seconds: float = Field(default=30.0, ge=0)
    exponential_base: float = Field(default=2.0, ge=1)


class CircuitBreakerConfig(BaseModel):
    """Configuration for circuit breaker middlewares."""

    failure_threshold: int = Field(default=5, ge=1)
    recovery_timeout_seconds: float = Field(default=60.0, ge=0)
    success_threshold: int = Field(default=2, ge=1)


class TimeoutConfig(BaseModel):
    """Configuration for the async timeout middleware."""

    enabled: bool = False
    seconds: float = Field(default=30.0, gt=0)


class LoggingInterceptorOptions(BaseModel):
    """Log levels and stage labels used by the logging interceptor."""

    start_level: str = "DEBUG"
    done_level: str = "INFO"
    error_level: str = "ERROR"
    next_level: str = "DEBUG"

    start_stage: str = "START"
    done_stage: str = "DONE"
    result_stage: str = "RESULT"
    error_stage: str = "ERROR"
    next_stage: str = "NEXT"
    complete_stage: str = "COMPLETE"

    log_parameters: bool = False
    log_result: bool = False
    unknown_type_name: str = "UnknownType"

    model_config = {"frozen": True}

    @field_validator("start_level", "done_level", "error_level", "next_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVEL_NAMES:
            raise ValueError(f"Unknown log level: {value}")
        return level

    def level_of(self, name: str) -> int:
        """Numeric logging level for a level name."""
        return logging.getLevelName(name)


class TracingInterceptorOptions(BaseModel):
    """Span naming and attributes used by the tracing interceptor."""

    span_prefix: str = ""
    record_arguments: bool = False
    record_result: bool = False
    unknown_type_name: str = "UnknownType"

    model_config = {"frozen": True}


class InterceptionConfig(BaseModel):
    """Configuration for interceptors."""

    display_name: str = "default"
    intercept_async: bool = True
    intercept_streams: bool = True
    wrap_faults: bool = False
    include_methods: Optional[List[str]] = None
    exclude_methods: List[str] = Field(default_factory=list)
    logging: LoggingInterceptorOptions = Field(
        default_factory=LoggingInterceptorOptions,
    )
    tracing: TracingInterceptorOptions = Field(
        default_factory=TracingInterceptorOptions,
    )


class RegistryConfig(BaseModel):
    """Ordered list of registered middlewares to enable."""

    enabled: List[str] = Field(default_factory=list)


class PipelineConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    retry: RetryConfig = Field(default_factory=RetryConfig)
    circuit_breaker: CircuitBreakerConfig = Field(
        default_factory=CircuitBreakerConfig,
    )
    timeout: TimeoutConfig = Field(default_factory=TimeoutConfig)
    interception: InterceptionConfig = Field(default_factory=InterceptionConfig)
    middlewares: RegistryConfig = Field(default_factory=RegistryConfig)
