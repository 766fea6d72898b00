"""
Monitoring Module - Unified logging and metrics tracking for AI operations.

This module provides observability for the AI gateway:
- Provider selection logging
- Request/response logging
- Token usage and latency metrics
- Error tracking by pipeline stage
- Cost estimation

Why Monitoring Matters:
======================
1. Cost Control: AI APIs charge per token - track spending
2. Performance: Identify slow providers
3. Debugging: Trace a request from selection to response
"""

from hrdefender.ai.monitoring.monitor import AIMonitor, AggregatedMetrics, RequestMetrics

__all__ = [
    "AIMonitor",
    "AggregatedMetrics",
    "RequestMetrics",
]
