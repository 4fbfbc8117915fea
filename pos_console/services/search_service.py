# ==============================================================================
# SERVICIO DE BÚSQUEDA (typeahead con debounce)
# ==============================================================================
# Resuelve un texto libre a una lista acotada de candidatos:
#   - reabastecimiento → catálogo global   (GET /product/search)
#   - resto de tipos   → inventario del PV (GET /point-of-sale/{id}/inventory/search)
#
# Debounce: cada tecla reinicia UN temporizador (500 ms por defecto); solo el
# último dispara, así que sale como máximo una petición por periodo de calma.
#
# Respuestas fuera de orden: cada petición lleva un número de secuencia
# creciente; una respuesta cuyo número no es el último emitido se descarta.
# ==============================================================================

import functools
import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional

import httpx

from pos_console import config
from pos_console.exceptions import ApiError
from pos_console.models import CandidateItem, TransactionType
from pos_console.performance_logger import log_error
from pos_console.repositories.interfaces import ICatalogRepository


class SearchService:
    """
    Servicio de búsqueda de candidatos.

    Estado de una sesión de usuario (ver SearchRegistry):
        query: Último texto recibido
        results: Candidatos de la última respuesta vigente
        selection: Último candidato seleccionado
    """

    def __init__(
        self,
        catalog_repo: ICatalogRepository,
        debounce_ms: int = config.SEARCH_DEBOUNCE_MS,
        min_chars: int = config.SEARCH_MIN_CHARS,
        timer_factory: Callable[..., Any] = threading.Timer,
        on_results: Optional[Callable[[List[CandidateItem]], None]] = None
    ):
        """
        Args:
            catalog_repo: Repositorio de catálogo
            debounce_ms: Espera tras la última tecla antes de buscar
            min_chars: Largo mínimo del texto (tras trim)
            timer_factory: Constructor compatible con threading.Timer
            on_results: Callback con los resultados vigentes
        """
        self.catalog_repo = catalog_repo
        self.debounce_ms = debounce_ms
        self.min_chars = min_chars
        self.timer_factory = timer_factory
        self.on_results = on_results

        self._lock = threading.RLock()
        self._timer = None
        self._timer_generation = 0
        self._seq = 0

        self.point_of_sale_id = 0
        self.transaction_type: Optional[TransactionType] = None
        self.query = ''
        self.results: List[CandidateItem] = []
        self.selection: Optional[CandidateItem] = None

    # =========================================================================
    # BÚSQUEDA DIRECTA
    # =========================================================================

    def is_searchable(self, query: Optional[str]) -> bool:
        return len((query or '').strip()) >= self.min_chars

    def fetch(
        self,
        point_of_sale_id: int,
        query: str,
        transaction_type: Optional[TransactionType]
    ) -> List[CandidateItem]:
        """
        Consulta el backend sin manejo de errores.

        Raises:
            ApiError: si el backend falla
        """
        text = (query or '').strip()
        if len(text) < self.min_chars:
            return []

        if transaction_type == TransactionType.RESTOCK:
            rows = self.catalog_repo.search_products(text)
            return [CandidateItem.from_product(row) for row in rows]

        if not point_of_sale_id:
            return []
        rows = self.catalog_repo.search_inventory(point_of_sale_id, text)
        return [CandidateItem.from_inventory(row) for row in rows]

    def search(
        self,
        point_of_sale_id: int,
        query: str,
        transaction_type: Optional[TransactionType]
    ) -> List[CandidateItem]:
        """
        Busca candidatos. Un fallo se registra en el log y devuelve lista vacía.
        """
        try:
            return self.fetch(point_of_sale_id, query, transaction_type)
        except (ApiError, httpx.HTTPError) as e:
            log_error('Búsqueda de candidatos', e, {
                'Texto': query,
                'Punto de venta': point_of_sale_id,
                'Tipo': transaction_type.value if transaction_type else '-',
            })
            return []

    # =========================================================================
    # ESTADO Y SECUENCIA
    # =========================================================================

    def _next_seq(self) -> int:
        with self._lock:
            self._seq += 1
            return self._seq

    def is_latest(self, seq: int) -> bool:
        with self._lock:
            return seq == self._seq

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        # un disparo ya en curso de este temporizador queda sin efecto
        self._timer_generation += 1

    def set_scope(self, point_of_sale_id: int, transaction_type: Optional[TransactionType]) -> None:
        """Cambia punto de venta / tipo; invalida la búsqueda en curso."""
        with self._lock:
            self.reset()
            self.point_of_sale_id = point_of_sale_id or 0
            self.transaction_type = transaction_type

    def reset(self) -> None:
        """
        Invalida texto, resultados y selección.
        Las respuestas en vuelo quedan obsoletas.
        """
        with self._lock:
            self._cancel_timer()
            self._seq += 1
            self.query = ''
            self.results = []
            self.selection = None

    def run_query(
        self,
        point_of_sale_id: int,
        transaction_type: Optional[TransactionType],
        query: str
    ) -> Dict[str, Any]:
        """
        Ejecuta una búsqueda inmediata etiquetada con secuencia.

        Returns:
            Dict con seq, stale (True si llegó otra búsqueda después) y results
        """
        seq = self._next_seq()
        results = self.search(point_of_sale_id, query, transaction_type)
        with self._lock:
            stale = seq != self._seq
            if not stale:
                self.query = query or ''
                self.results = results
        return {'seq': seq, 'stale': stale, 'results': [] if stale else results}

    # =========================================================================
    # DEBOUNCE
    # =========================================================================

    def on_query_change(self, query: str) -> None:
        """
        Registra una tecla: reinicia el temporizador pendiente.
        Con menos de `min_chars` caracteres limpia los resultados.
        """
        with self._lock:
            self._cancel_timer()
            self.query = query or ''
            if not self.is_searchable(query):
                self._seq += 1
                self.results = []
                return
            generation = self._timer_generation
            self._timer = self.timer_factory(
                self.debounce_ms / 1000.0,
                functools.partial(self._fire, generation)
            )
            self._timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._timer_generation:
                return
            self._timer = None
            query = self.query
            pos_id = self.point_of_sale_id
            ttype = self.transaction_type

        outcome = self.run_query(pos_id, ttype, query)
        if not outcome['stale'] and self.on_results is not None:
            self.on_results(outcome['results'])

    def select(self, candidate: CandidateItem) -> CandidateItem:
        """
        Selecciona un candidato: cancela el temporizador pendiente y
        deja el candidato listo para agregarse al borrador.
        """
        with self._lock:
            self._cancel_timer()
            self._seq += 1
            self.selection = candidate
            self.query = ''
            self.results = []
        return candidate

    @property
    def has_pending(self) -> bool:
        return self._timer is not None


class SearchRegistry:
    """
    Un SearchService por sesión de usuario.

    Cada sesión tiene su propio alcance, secuencia y temporizador, así que la
    búsqueda de un operador nunca invalida la de otro. Se conservan como
    máximo `max_sessions`; la menos usada se descarta primero.
    """

    def __init__(self, factory: Callable[[], SearchService], max_sessions: int = 256):
        self.factory = factory
        self.max_sessions = max_sessions
        self._services: 'OrderedDict[str, SearchService]' = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: str) -> SearchService:
        with self._lock:
            service = self._services.get(session_id)
            if service is None:
                service = self.factory()
                self._services[session_id] = service
                while len(self._services) > self.max_sessions:
                    _, evicted = self._services.popitem(last=False)
                    evicted.reset()
            else:
                self._services.move_to_end(session_id)
            return service

    def discard(self, session_id: str) -> None:
        with self._lock:
            service = self._services.pop(session_id, None)
        if service is not None:
            service.reset()

    def reset_all(self) -> None:
        with self._lock:
            services = list(self._services.values())
            self._services.clear()
        for service in services:
            service.reset()

    def __len__(self) -> int:
        return len(self._services)
