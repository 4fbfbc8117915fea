# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (se inyecta un transporte httpx.MockTransport)
#   - Cambiar de backend sin tocar servicios ni rutas
# ==============================================================================

import uuid
from typing import Optional

import httpx
from flask import has_request_context, session

from pos_console import config

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Acceso al backend REST
# ═══════════════════════════════════════════════════════════════════════════════
from pos_console.repositories import (
    AuthRepository,
    CatalogRepository,
    TransactionRepository,
    create_http_client,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de la consola
# ═══════════════════════════════════════════════════════════════════════════════
from pos_console.services import (
    CartService,
    EnrichmentService,
    PayloadService,
    PricingService,
    SearchRegistry,
    SearchService,
    TransactionService,
    ValidationService,
)


def session_token() -> Optional[str]:
    """Token JWT de la sesión Flask actual (None fuera de una petición)."""
    if not has_request_context():
        return None
    return session.get('token')


SEARCH_SESSION_KEY = 'busqueda_id'


def search_session_id() -> str:
    """Identificador de la búsqueda de la sesión actual (se crea si falta)."""
    if not has_request_context():
        return 'local'
    if SEARCH_SESSION_KEY not in session:
        session[SEARCH_SESSION_KEY] = uuid.uuid4().hex
    return session[SEARCH_SESSION_KEY]


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    de cada repositorio y servicio.

    Uso:
        container = AppContainer(base_url='http://localhost:3000')
        cart_service = container.cart_service
        transaction_service = container.transaction_service
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_url: str = None, transport: httpx.BaseTransport = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_url: str = None, transport: httpx.BaseTransport = None):
        """
        Inicializa el contenedor.

        Args:
            base_url: URL del backend (por defecto POS_API_URL)
            transport: Transporte httpx alternativo (tests)
        """
        if self._initialized:
            return

        self._base_url = base_url or config.API_BASE_URL
        self._transport = transport

        # Cliente HTTP (lazy loading)
        self._http_client: Optional[httpx.Client] = None

        # Inicializar repositorios (lazy loading)
        self._catalog_repo: Optional[CatalogRepository] = None
        self._transaction_repo: Optional[TransactionRepository] = None
        self._auth_repo: Optional[AuthRepository] = None

        # Inicializar servicios (lazy loading)
        self._pricing_service: Optional[PricingService] = None
        self._validation_service: Optional[ValidationService] = None
        self._payload_service: Optional[PayloadService] = None
        self._search_registry: Optional[SearchRegistry] = None
        self._cart_service: Optional[CartService] = None
        self._enrichment_service: Optional[EnrichmentService] = None
        self._transaction_service: Optional[TransactionService] = None

        self._initialized = True

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def http_client(self) -> httpx.Client:
        """Cliente httpx compartido (sin timeout)."""
        if self._http_client is None:
            self._http_client = create_http_client(self._base_url, self._transport)
        return self._http_client

    @property
    def catalog_repo(self) -> CatalogRepository:
        """Repositorio de catálogo (singleton)."""
        if self._catalog_repo is None:
            self._catalog_repo = CatalogRepository(self.http_client, session_token)
        return self._catalog_repo

    @property
    def transaction_repo(self) -> TransactionRepository:
        """Repositorio de transacciones (singleton)."""
        if self._transaction_repo is None:
            self._transaction_repo = TransactionRepository(self.http_client, session_token)
        return self._transaction_repo

    @property
    def auth_repo(self) -> AuthRepository:
        """Repositorio de autenticación (singleton)."""
        if self._auth_repo is None:
            self._auth_repo = AuthRepository(self.http_client)
        return self._auth_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def pricing_service(self) -> PricingService:
        """Servicio de precios (singleton)."""
        if self._pricing_service is None:
            self._pricing_service = PricingService()
        return self._pricing_service

    @property
    def validation_service(self) -> ValidationService:
        """Servicio de validación (singleton)."""
        if self._validation_service is None:
            self._validation_service = ValidationService(self.pricing_service)
        return self._validation_service

    @property
    def payload_service(self) -> PayloadService:
        """Servicio de payload (singleton)."""
        if self._payload_service is None:
            self._payload_service = PayloadService()
        return self._payload_service

    @property
    def search_registry(self) -> SearchRegistry:
        """Búsquedas por sesión (singleton)."""
        if self._search_registry is None:
            self._search_registry = SearchRegistry(lambda: SearchService(self.catalog_repo))
        return self._search_registry

    def current_search_service(self) -> SearchService:
        """Servicio de búsqueda de la sesión Flask actual."""
        return self.search_registry.get(search_session_id())

    @property
    def cart_service(self) -> CartService:
        """Servicio de borrador (singleton)."""
        if self._cart_service is None:
            self._cart_service = CartService(self.pricing_service, self.current_search_service)
        return self._cart_service

    @property
    def enrichment_service(self) -> EnrichmentService:
        """Servicio de enriquecimiento (singleton)."""
        if self._enrichment_service is None:
            self._enrichment_service = EnrichmentService()
        return self._enrichment_service

    @property
    def transaction_service(self) -> TransactionService:
        """Servicio de transacciones (singleton)."""
        if self._transaction_service is None:
            self._transaction_service = TransactionService(
                self.catalog_repo,
                self.transaction_repo,
                self.validation_service,
                self.payload_service,
                self.enrichment_service
            )
        return self._transaction_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Útil para testing o para cambiar de backend.
        """
        if self._search_registry is not None:
            self._search_registry.reset_all()
        if self._http_client is not None:
            self._http_client.close()
        self._http_client = None

        self._catalog_repo = None
        self._transaction_repo = None
        self._auth_repo = None

        self._pricing_service = None
        self._validation_service = None
        self._payload_service = None
        self._search_registry = None
        self._cart_service = None
        self._enrichment_service = None
        self._transaction_service = None

    @classmethod
    def get_instance(cls, base_url: str = None, transport: httpx.BaseTransport = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            base_url: URL del backend (solo se usa en primera llamada)
            transport: Transporte httpx (solo se usa en primera llamada)

        Returns:
            Instancia del contenedor
        """
        if cls._instance is None:
            return cls(base_url, transport)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


# Función helper para obtener el contenedor global
def get_container(base_url: str = None, transport: httpx.BaseTransport = None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        base_url: URL del backend
        transport: Transporte httpx alternativo

    Returns:
        Instancia del contenedor
    """
    return AppContainer.get_instance(base_url, transport)
