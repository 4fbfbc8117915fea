# ==============================================================================
# REPOSITORIO BASE - Acceso al backend REST
# ==============================================================================
# Funcionalidad común para todos los repositorios:
#   - Cliente httpx compartido (sin timeout ni reintentos)
#   - Inyección del token Bearer de la sesión actual
#   - Conversión de respuestas no 2xx en ApiError
#   - 401 → AuthenticationExpiredError (el llamador limpia la sesión)
# ==============================================================================

from typing import Any, Callable, Dict, Optional
from abc import ABC

import httpx

from pos_console.exceptions import ApiError, AuthenticationExpiredError


TokenProvider = Callable[[], Optional[str]]


def create_http_client(base_url: str, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """
    Crea el cliente HTTP hacia el backend.

    Args:
        base_url: URL base del backend (http://host:3000)
        transport: Transporte alternativo (tests: httpx.MockTransport)
    """
    return httpx.Client(
        base_url=base_url,
        timeout=None,
        headers={'Content-Type': 'application/json'},
        transport=transport,
    )


class ApiRepository(ABC):
    """
    Clase base para los repositorios que hablan con el backend.

    Al cambiar de backend:
    - Esta clase concentra el transporte y el manejo de errores HTTP
    - Los repositorios concretos solo conocen rutas y parámetros
    """

    def __init__(self, client: httpx.Client, token_provider: Optional[TokenProvider] = None):
        """
        Args:
            client: Cliente httpx ya configurado con base_url
            token_provider: Función que devuelve el token JWT actual (o None)
        """
        self.client = client
        self.token_provider = token_provider

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        if token:
            return {'Authorization': f'Bearer {token}'}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Ejecuta una petición y valida el estado.

        Raises:
            AuthenticationExpiredError: si el backend responde 401
            ApiError: si la respuesta no es 2xx o falla la conexión
        """
        try:
            response = self.client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f'No se pudo conectar con el backend: {e}') from e

        if response.status_code == 401:
            raise AuthenticationExpiredError(response.text)
        if not response.is_success:
            raise ApiError(
                f'Error {response.status_code}: {response.reason_phrase}',
                status=response.status_code,
                body=response.text
            )
        return response

    def _json(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                'Respuesta inválida del backend',
                status=response.status_code,
                body=response.text
            ) from e

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._json(self._request('GET', path, params=params))

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._json(self._request('POST', path, json=payload))
