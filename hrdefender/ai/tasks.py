"""
Task categories and output formats shared by the selector, prompts and routers.
"""

from enum import Enum


class TaskType(str, Enum):
    """Task categories used to bias provider and prompt selection."""
    QUESTION_ANSWERING = "question_answering"
    TEXT_GENERATION = "text_generation"
    DOCUMENT_ANALYSIS = "document_analysis"
    PATTERN_DETECTION = "pattern_detection"
    LEGAL_STRATEGY = "legal_strategy"
    LEGAL_ANALYSIS = "legal_analysis"
    SUMMARIZATION = "summarization"
    TRANSLATION = "translation"
    CONTENT_MODERATION = "content_moderation"
    BRAINSTORMING = "brainstorming"
    CREATIVE_WRITING = "creative_writing"
    CODE_GENERATION = "code_generation"
    RISK_ASSESSMENT = "risk_assessment"
    DATA_ANALYSIS = "data_analysis"


class OutputFormat(str, Enum):
    """Output formats a caller can request from generate_content."""
    JSON = "json"
    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"
