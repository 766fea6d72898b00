"""
Routers module - API endpoint handlers organized by feature.

Each router handles a specific domain of the API:
- ai: content generation, document analysis, patterns, strategy, status
- live: multi-turn chat sessions with optional SSE streaming
- legal_resources: OHCHR resource catalogue lookup
- functions: listing and invoking registered handlers
"""
