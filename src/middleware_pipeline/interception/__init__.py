"""
Interception Package - Method Interception on Top of the Bridge.

Components:
    - Interceptor / InterceptorOptions: proxy routing method calls
      through void and task pipelines over InvocationContext
    - StreamObserver / observe_stream: generator methods observed item
      by item
    - LoggingInterceptor: START / RESULT / DONE / ERROR call logging
    - TracingInterceptor: one OpenTelemetry span per call
"""

from middleware_pipeline.interception.interceptor import (
    Interceptor,
    InterceptorOptions,
    create_interceptor,
    find_token,
)
from middleware_pipeline.interception.logging_interceptor import LoggingInterceptor
from middleware_pipeline.interception.streams import StreamObserver, observe_stream
from middleware_pipeline.interception.tracing_interceptor import TracingInterceptor

__all__ = [
    "Interceptor",
    "InterceptorOptions",
    "LoggingInterceptor",
    "StreamObserver",
    "TracingInterceptor",
    "create_interceptor",
    "find_token",
    "observe_stream",
]
