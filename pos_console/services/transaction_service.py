# ==============================================================================
# SERVICIO DE TRANSACCIONES - Envío del borrador e historial enriquecido
# ==============================================================================
# Orquesta las piezas puras (validación, forma del payload, enriquecimiento)
# con las llamadas al backend:
#   - submit(): validar → construir payload → UN POST /inventory-transaction/bulk
#   - list_transactions(): historial + referencias en paralelo → enriquecer
#
# Sin timeout ni reintentos. Un segundo envío mientras hay uno en vuelo se
# rechaza (SubmissionInProgressError).
# ==============================================================================

import calendar
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pos_console.exceptions import (
    ApiError,
    AuthenticationExpiredError,
    DraftValidationError,
    SubmissionError,
    SubmissionInProgressError,
)
from pos_console.models import ReferenceSnapshot, TransactionDraft
from pos_console.performance_logger import log_error
from pos_console.repositories.interfaces import ICatalogRepository, ITransactionRepository
from pos_console.services.enrichment_service import EnrichmentService
from pos_console.services.payload_service import PayloadService
from pos_console.services.validation_service import ValidationService


DATE_FORMAT = '%Y-%m-%d'


def _month_ago(today: date) -> date:
    year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
    day = min(today.day, calendar.monthrange(year, month)[1])
    return today.replace(year=year, month=month, day=day)


def resolve_date_range(
    period: Optional[str],
    custom_start: Optional[str] = None,
    custom_end: Optional[str] = None,
    today: Optional[date] = None
) -> Tuple[Optional[str], Optional[str]]:
    """
    Calcula el rango de fechas según el período solicitado.

    Args:
        period: 'today', 'week' (7 días), 'month' (un mes atrás), 'custom' o None
        custom_start: Fecha inicio para período custom (YYYY-MM-DD)
        custom_end: Fecha fin para período custom (YYYY-MM-DD)
        today: Fecha de referencia (por defecto hoy)

    Returns:
        Tupla (startDate, endDate) en formato YYYY-MM-DD, o (None, None)
        si no hay filtro de fechas
    """
    today = today or date.today()

    if period == 'today':
        start = today
    elif period == 'week':
        start = today - timedelta(days=7)
    elif period == 'month':
        start = _month_ago(today)
    elif period == 'custom':
        if not custom_start or not custom_end:
            return None, None
        try:
            start = date.fromisoformat(custom_start)
            end = date.fromisoformat(custom_end)
        except ValueError:
            return None, None
        if start > end:
            start, end = end, start
        return start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT)
    else:
        return None, None

    return start.strftime(DATE_FORMAT), today.strftime(DATE_FORMAT)


class TransactionService:
    """
    Servicio de transacciones.

    Responsabilidades:
    - Enviar el borrador (validación previa y protección de doble envío)
    - Cargar las colecciones de referencia en paralelo
    - Entregar el historial enriquecido
    """

    REFERENCE_LOADERS = (
        ('products', 'list_products', 'Cargar productos'),
        ('points_of_sale', 'list_points_of_sale', 'Cargar puntos de venta'),
        ('users', 'list_users', 'Cargar usuarios'),
        ('inventories', 'list_inventories', 'Cargar inventarios'),
    )

    def __init__(
        self,
        catalog_repo: ICatalogRepository,
        transaction_repo: ITransactionRepository,
        validation_service: ValidationService,
        payload_service: PayloadService,
        enrichment_service: EnrichmentService
    ):
        self.catalog_repo = catalog_repo
        self.transaction_repo = transaction_repo
        self.validation_service = validation_service
        self.payload_service = payload_service
        self.enrichment_service = enrichment_service

        self._submit_lock = threading.Lock()

    # =========================================================================
    # ENVÍO
    # =========================================================================

    @property
    def is_submitting(self) -> bool:
        return self._submit_lock.locked()

    def submit(self, draft: TransactionDraft) -> Any:
        """
        Valida y envía el borrador al backend.

        El borrador no se modifica: el llamador lo descarta solo si el
        envío fue exitoso.

        Returns:
            Respuesta del backend

        Raises:
            SubmissionInProgressError: ya hay un envío en curso
            DraftValidationError: el borrador tiene errores (no hubo petición)
            AuthenticationExpiredError: el backend respondió 401
            SubmissionError: cualquier otra respuesta no exitosa
        """
        if not self._submit_lock.acquire(blocking=False):
            raise SubmissionInProgressError('Ya hay un envío en curso')

        try:
            result = self.validation_service.validate(draft)
            if not result.valid:
                raise DraftValidationError(result.errors)

            payload = self.payload_service.build(draft)
            try:
                return self.transaction_repo.submit_bulk(payload)
            except AuthenticationExpiredError:
                raise
            except ApiError as e:
                log_error('Enviar transacción', e, {
                    'Tipo': payload.get('transactionType'),
                    'Ítems': len(payload.get('items') or []),
                    'Respuesta': e.body,
                })
                raise SubmissionError(e.status, e.body or str(e)) from e
        finally:
            self._submit_lock.release()

    # =========================================================================
    # HISTORIAL
    # =========================================================================

    def _load_collection(self, method_name: str, context: str) -> Optional[List[Dict[str, Any]]]:
        try:
            return getattr(self.catalog_repo, method_name)()
        except AuthenticationExpiredError:
            raise
        except ApiError as e:
            log_error(context, e)
            return None

    def load_reference_snapshot(self) -> ReferenceSnapshot:
        """
        Carga productos, puntos de venta, usuarios e inventarios en paralelo.
        Una colección que falla queda en None (el enriquecimiento usa
        etiquetas de reemplazo para ese campo).
        """
        with ThreadPoolExecutor(max_workers=len(self.REFERENCE_LOADERS)) as executor:
            futures = {
                field: executor.submit(self._load_collection, method_name, context)
                for field, method_name, context in self.REFERENCE_LOADERS
            }
            collections = {field: future.result() for field, future in futures.items()}
        return ReferenceSnapshot(**collections)

    def list_transactions(
        self,
        user_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Obtiene el historial enriquecido.

        Raises:
            ApiError: si falla la lectura del historial
        """
        records = self.transaction_repo.list_transactions(user_id, start_date, end_date)
        snapshot = self.load_reference_snapshot()
        return self.enrichment_service.enrich(records, snapshot)

    def list_points_of_sale(self) -> List[Dict[str, Any]]:
        return self.catalog_repo.list_points_of_sale()
