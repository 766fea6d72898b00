"""
AI Module - provider selection and content generation for HR Defender.

Architecture Overview:
=====================

    HTTP request
        │
        ▼
    Router (hrdefender.routers)         validates the request shape
        │
        ▼
    Provider Selector (factory)         static routing table by task type
        │
        ▼
    Provider Adapter (providers/)       Gemini / OpenAI / Anthropic / Mock
        │
        ▼
    Response Normalizer (normalizer/)   staged JSON extraction
        │
        ▼
    Router response

Module Structure:
================
- providers/: AI provider clients with a uniform capability set
- factory.py: the Provider Selector
- normalizer/: JSON extraction from free-form model text
- prompts/: Prompt templates for consistent LLM interactions
- schemas/: Loosely typed analysis / pattern / strategy results
- handlers/: Registry of named utility handlers
- monitoring/: Logging, metrics, and usage tracking
"""

# Version of the AI module
__version__ = "0.1.0"
