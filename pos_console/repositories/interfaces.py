# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos que deben cumplir los repositorios del backend REST.
#
# 1. INDEPENDENCIA DEL TRANSPORTE
#    - Los servicios dependen de estas interfaces, NO de httpx
#    - Un backend distinto (o un fake en memoria) solo requiere otra clase
#
# 2. TESTING
#    - Los tests de servicios usan objetos simples que cumplen el protocolo
#
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class ICatalogRepository(Protocol):
    """
    Lecturas de catálogo: búsquedas y colecciones de referencia.
    """

    def search_products(self, query: str) -> List[Dict[str, Any]]:
        """GET /product/search?q= (reabastecimiento)."""
        ...

    def search_inventory(self, point_of_sale_id: int, query: str) -> List[Dict[str, Any]]:
        """GET /point-of-sale/{id}/inventory/search?q=."""
        ...

    def list_products(self) -> List[Dict[str, Any]]:
        ...

    def list_points_of_sale(self) -> List[Dict[str, Any]]:
        ...

    def list_users(self) -> List[Dict[str, Any]]:
        ...

    def list_inventories(self) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class ITransactionRepository(Protocol):
    """
    Transacciones de inventario.
    """

    def list_transactions(
        self,
        user_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """GET /inventory-transaction con filtros opcionales."""
        ...

    def submit_bulk(self, payload: Dict[str, Any]) -> Any:
        """POST /inventory-transaction/bulk."""
        ...
