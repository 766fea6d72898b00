"""
Prompts Module - Centralized prompt templates for AI interactions.

This module contains all prompt templates used by the AI gateway.
Keeping prompts centralized makes them:
- Easy to update and iterate
- Consistent across providers
- Testable and version-controlled
"""

from hrdefender.ai.prompts.system_prompts import (
    BASE_SYSTEM_PROMPT,
    build_system_prompt,
)
from hrdefender.ai.prompts.analysis_prompts import (
    DOCUMENT_ANALYSIS_SYSTEM_PROMPT,
    PATTERN_DETECTION_SYSTEM_PROMPT,
    STRATEGY_SYSTEM_PROMPT,
    HELP_SYSTEM_PROMPT,
    build_brainstorming_prompt,
    build_help_prompt,
)
from hrdefender.ai.prompts.chat_prompts import build_chat_system_prompt

__all__ = [
    "BASE_SYSTEM_PROMPT",
    "build_system_prompt",
    "DOCUMENT_ANALYSIS_SYSTEM_PROMPT",
    "PATTERN_DETECTION_SYSTEM_PROMPT",
    "STRATEGY_SYSTEM_PROMPT",
    "HELP_SYSTEM_PROMPT",
    "build_brainstorming_prompt",
    "build_help_prompt",
    "build_chat_system_prompt",
]
