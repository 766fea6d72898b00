"""
Chat Prompts - system prompt for live chat sessions.

A session can carry an optional context (role, task, topic, document) given
when it was created. The context is folded into the system prompt on every
turn so the assistant stays on topic.
"""

from typing import Any, Dict, Optional

from hrdefender.ai.prompts.analysis_prompts import truncate_text

CHAT_SYSTEM_PROMPT = """You are a live assistant for human rights defenders.
Answer in a conversational tone, keep answers focused, and ask a clarifying
question when the request is ambiguous. Never reveal or invent personal data
about victims or witnesses."""

# Document excerpts in the chat context are capped to keep every turn small
MAX_CHAT_DOCUMENT_CHARS = 2000


def build_chat_system_prompt(context: Optional[Dict[str, Any]] = None) -> str:
    """
    Build the system prompt for a chat session.

    Args:
        context: Optional {"role", "task", "topic", "document"} dict

    Returns:
        System prompt string
    """
    if not context:
        return CHAT_SYSTEM_PROMPT

    lines = [CHAT_SYSTEM_PROMPT, "", "SESSION CONTEXT:"]
    if context.get("role"):
        lines.append(f"- The user's role: {context['role']}")
    if context.get("task"):
        lines.append(f"- Current task: {context['task']}")
    if context.get("topic"):
        lines.append(f"- Topic: {context['topic']}")
    if context.get("document"):
        excerpt = truncate_text(str(context["document"]), MAX_CHAT_DOCUMENT_CHARS)
        lines.append(f"- Document under discussion:\n{excerpt}")

    # Nothing recognizable in the context
    if len(lines) == 3:
        return CHAT_SYSTEM_PROMPT
    return "\n".join(lines)
