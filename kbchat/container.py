import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Knowledge base, settings and storage are shared; every resolved
    ChatService is a new session with its own conversation and budget.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .config.locales import get_catalog
    from .core.models.generation import GenerationSettings
    from .core.protocols.extractor import (
        RemoteTextLoaderProtocol,
        TextExtractorProtocol,
    )
    from .core.protocols.llm import GenerationClientProtocol
    from .core.protocols.storage import (
        CredentialStoreProtocol,
        KeyValueStoreProtocol,
    )
    from .core.services.budget_service import SessionBudgetTracker
    from .core.services.chat_service import ChatService
    from .core.services.history_service import HistoryExporter
    from .core.services.knowledge_base_service import KnowledgeBaseService
    from .core.services.search_service import SearchService
    from .core.services.settings_service import SettingsService
    from .infrastructure.document_loaders import CompositeLoader, RemotePDFLoader
    from .infrastructure.llm.openai_client import OpenAIGenerationClient
    from .infrastructure.storage import JsonFileStore, KeyValueCredentialStore

    container.register(
        KeyValueStoreProtocol,
        lambda: JsonFileStore(settings.storage_path),
        singleton=True,
    )

    container.register(
        CredentialStoreProtocol,
        lambda: KeyValueCredentialStore(
            store=container.resolve(KeyValueStoreProtocol),
            fallback=settings.api_key,
        ),
        singleton=True,
    )

    container.register(TextExtractorProtocol, CompositeLoader, singleton=True)

    container.register(
        RemoteTextLoaderProtocol,
        lambda: RemotePDFLoader(timeout=settings.http_timeout),
        singleton=True,
    )

    container.register(
        GenerationClientProtocol,
        lambda: OpenAIGenerationClient(
            credentials=container.resolve(CredentialStoreProtocol),
            base_url=settings.llm_base_url,
        ),
        singleton=True,
    )

    def make_settings_service() -> SettingsService:
        service = SettingsService(
            store=container.resolve(KeyValueStoreProtocol),
            defaults=GenerationSettings(
                model=settings.llm_model,
                temperature=settings.llm_temperature,
                system_instruction=settings.system_instruction,
            ),
        )
        service.load()
        return service

    container.register(SettingsService, make_settings_service, singleton=True)

    def make_knowledge_base() -> KnowledgeBaseService:
        kb = KnowledgeBaseService(
            store=container.resolve(KeyValueStoreProtocol),
            extractor=container.resolve(TextExtractorProtocol),
            remote_loader=container.resolve(RemoteTextLoaderProtocol),
            chunk_size=settings.chunk_size,
            chars_per_token=settings.chars_per_token,
        )
        kb.load()
        return kb

    container.register(KnowledgeBaseService, make_knowledge_base, singleton=True)

    container.register(
        SearchService,
        lambda: SearchService(top_k=settings.rag_top_k),
        singleton=True,
    )

    container.register(HistoryExporter, HistoryExporter, singleton=True)

    container.register(
        SessionBudgetTracker,
        lambda: SessionBudgetTracker(total_limit=settings.total_token_limit),
    )

    container.register(
        ChatService,
        lambda: ChatService(
            client=container.resolve(GenerationClientProtocol),
            knowledge_base=container.resolve(KnowledgeBaseService),
            search_service=container.resolve(SearchService),
            budget=container.resolve(SessionBudgetTracker),
            catalog=get_catalog(settings.locale),
            settings_provider=lambda: container.resolve(SettingsService).current,
        ),
    )

    logger.info("Container configured")
    return container
