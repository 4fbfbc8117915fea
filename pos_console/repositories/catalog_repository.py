# ==============================================================================
# REPOSITORIO DE CATÁLOGO - Productos, puntos de venta, usuarios, inventarios
# ==============================================================================

from typing import Any, Dict, List
from urllib.parse import quote

from pos_console.performance_logger import profile_function
from pos_console.repositories.base import ApiRepository


def as_list(data: Any) -> List[Dict[str, Any]]:
    """
    Normaliza una respuesta de colección.
    Acepta una lista directa o un objeto con `data` / `items`.
    """
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ('data', 'items', 'results'):
            if isinstance(data.get(key), list):
                return data[key]
    return []


class CatalogRepository(ApiRepository):
    """
    Lecturas de catálogo del backend.

    Todas las colecciones son instantáneas de solo lectura; nada en la
    consola las modifica.
    """

    @profile_function(name="Buscar productos (catálogo)")
    def search_products(self, query: str) -> List[Dict[str, Any]]:
        return as_list(self._get('/product/search', params={'q': query}))

    @profile_function(name="Buscar inventario de punto de venta")
    def search_inventory(self, point_of_sale_id: int, query: str) -> List[Dict[str, Any]]:
        path = f'/point-of-sale/{quote(str(point_of_sale_id))}/inventory/search'
        return as_list(self._get(path, params={'q': query}))

    @profile_function(name="Cargar productos")
    def list_products(self) -> List[Dict[str, Any]]:
        return as_list(self._get('/product'))

    @profile_function(name="Cargar puntos de venta")
    def list_points_of_sale(self) -> List[Dict[str, Any]]:
        return as_list(self._get('/point-of-sale'))

    @profile_function(name="Cargar usuarios")
    def list_users(self) -> List[Dict[str, Any]]:
        return as_list(self._get('/users'))

    @profile_function(name="Cargar inventarios")
    def list_inventories(self) -> List[Dict[str, Any]]:
        return as_list(self._get('/inventory'))
