# ==============================================================================
# REPOSITORIO DE TRANSACCIONES DE INVENTARIO
# ==============================================================================

from typing import Any, Dict, List, Optional

from pos_console.performance_logger import profile_function
from pos_console.repositories.base import ApiRepository
from pos_console.repositories.catalog_repository import as_list


class TransactionRepository(ApiRepository):
    """
    Lectura del historial y envío de transacciones en bloque.

    El envío no es idempotente: dos llamadas crean dos transacciones.
    La protección contra doble envío vive en TransactionService.
    """

    @profile_function(name="Cargar transacciones")
    def list_transactions(
        self,
        user_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {}
        if user_id:
            params['userId'] = user_id
        if start_date and end_date:
            params['startDate'] = start_date
            params['endDate'] = end_date
        return as_list(self._get('/inventory-transaction', params=params or None))

    @profile_function(name="Enviar transacción en bloque")
    def submit_bulk(self, payload: Dict[str, Any]) -> Any:
        return self._post('/inventory-transaction/bulk', payload)
