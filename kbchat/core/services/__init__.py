"""Core business services."""
from .search_service import SearchService
from .prompt_service import PromptAssembler
from .stream_service import StreamOrchestrator
from .error_service import ErrorCategory, ErrorClassification, classify_error
from .budget_service import SessionBudgetTracker, estimate_tokens
from .knowledge_base_service import KnowledgeBaseService
from .history_service import HistoryExporter
from .settings_service import SettingsService
from .chat_service import ChatService, TurnEvent, TurnOutcome, TurnStatus

__all__ = [
    "SearchService",
    "PromptAssembler",
    "StreamOrchestrator",
    "ErrorCategory",
    "ErrorClassification",
    "classify_error",
    "SessionBudgetTracker",
    "estimate_tokens",
    "KnowledgeBaseService",
    "HistoryExporter",
    "SettingsService",
    "ChatService",
    "TurnEvent",
    "TurnOutcome",
    "TurnStatus",
]
