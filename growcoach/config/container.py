"""Dependency injection container."""

import logging
from typing import Any, Dict, Optional

from ..application.interfaces import IAIService
from ..application.services import SessionCache, SessionLockRegistry
from ..application.use_cases import (
    CreateSessionUseCase,
    RunTurnUseCase,
    GetHistoryUseCase,
    ListSessionsUseCase,
    GetFaceSheetUseCase,
    PutFaceSheetUseCase,
)
from ..domain.repositories import IDocumentStore
from ..domain.value_objects import CoachType, DEFAULT_COACH_TYPE
from ..infrastructure.cache import LRUSessionCache
from ..infrastructure.external_services import AIServiceImpl
from ..infrastructure.repositories import InMemoryDocumentStore, SQLDocumentStore
from .settings import Settings

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container."""

    def __init__(
        self,
        settings: Settings,
        ai_service: Optional[IAIService] = None,
        store: Optional[IDocumentStore] = None
    ):
        self.settings = settings
        self._instances: Dict[str, Any] = {}
        self._initialized = False
        self._ai_service_override = ai_service
        self._store_override = store
        self._sql_store: Optional[SQLDocumentStore] = None

    async def initialize(self) -> None:
        """Initialize container and all dependencies."""
        if self._initialized:
            return

        try:
            await self._register_infrastructure_services()
            self._register_application_services()
            self._register_use_cases()

            self._initialized = True
            logger.info(
                f"Dependency injection container initialized "
                f"(store={self.settings.store_backend}, ai={self.settings.ai_provider})"
            )

        except Exception as e:
            logger.error(f"Failed to initialize container: {e}")
            raise

    async def _register_infrastructure_services(self) -> None:
        """Register store, cache backend and AI service."""
        if self._store_override is not None:
            store = self._store_override
        elif self.settings.store_backend == "sql":
            store = SQLDocumentStore(self.settings.database_url, echo=self.settings.debug)
            self._sql_store = store
            await store.create_schema()
        else:
            store = InMemoryDocumentStore()

        self._instances["document_store"] = store
        self._instances["cache_backend"] = LRUSessionCache(
            max_entries=self.settings.session_cache_max_entries
        )
        self._instances["ai_service"] = self._ai_service_override or AIServiceImpl(
            provider=self.settings.ai_provider,
            model=self.settings.ai_model,
            openai_api_key=self.settings.openai_api_key,
            anthropic_api_key=self.settings.anthropic_api_key,
            max_tokens=self.settings.ai_max_tokens,
            temperature=self.settings.ai_temperature
        )

    def _register_application_services(self) -> None:
        """Register the session cache."""
        default_coach_type = CoachType.parse(self.settings.default_coach_type)
        if default_coach_type is None:
            logger.warning(
                f"Unknown default coach type {self.settings.default_coach_type!r}, "
                f"using {DEFAULT_COACH_TYPE.value}"
            )
            default_coach_type = DEFAULT_COACH_TYPE

        self._instances["default_coach_type"] = default_coach_type
        self._instances["session_cache"] = SessionCache(
            store=self._instances["document_store"],
            backend=self._instances["cache_backend"],
            locks=SessionLockRegistry(),
            default_coach_type=default_coach_type
        )

    def _register_use_cases(self) -> None:
        """Register use cases."""
        store = self._instances["document_store"]
        session_cache = self._instances["session_cache"]

        self._instances["create_session"] = CreateSessionUseCase(session_cache)
        self._instances["run_turn"] = RunTurnUseCase(
            session_cache,
            self._instances["ai_service"],
            max_user_text_length=self.settings.max_user_text_length
        )
        self._instances["get_history"] = GetHistoryUseCase(
            session_cache,
            default_limit=self.settings.history_page_size,
            max_limit=max(self.settings.history_max_page_size, self.settings.history_page_size)
        )
        self._instances["list_sessions"] = ListSessionsUseCase(
            store, default_coach_type=self._instances["default_coach_type"]
        )
        self._instances["get_face_sheet"] = GetFaceSheetUseCase(store)
        self._instances["put_face_sheet"] = PutFaceSheetUseCase(store, session_cache)

    def get(self, service_name: str) -> Any:
        """Get service instance."""
        if not self._initialized:
            raise RuntimeError("Container not initialized")

        instance = self._instances.get(service_name)
        if instance is None:
            raise ValueError(f"Service '{service_name}' not found")

        return instance

    async def health_check(self, include_ai: bool = True) -> Dict[str, bool]:
        """Check health of all services."""
        health_status = {}

        try:
            health_status["document_store"] = await self.get("document_store").health_check()
        except Exception as e:
            logger.error(f"Document store health check failed: {e}")
            health_status["document_store"] = False

        if include_ai:
            try:
                ai_health = await self.get("ai_service").health_check()
                health_status.update(ai_health)
            except Exception as e:
                logger.error(f"AI service health check failed: {e}")
                health_status["ai_service"] = False

        return health_status

    async def close(self) -> None:
        """Close container and cleanup resources."""
        try:
            if self._initialized:
                await self.get("session_cache").drain()
            if self._sql_store is not None:
                await self._sql_store.close()
            logger.info("Container closed successfully")
        except Exception as e:
            logger.error(f"Error closing container: {e}")
        finally:
            self._initialized = False
