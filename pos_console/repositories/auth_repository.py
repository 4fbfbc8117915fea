# ==============================================================================
# REPOSITORIO DE AUTENTICACIÓN
# ==============================================================================
# Login contra el backend. El token resultante se guarda en la sesión de
# Flask y los demás repositorios lo inyectan como Bearer.
# ==============================================================================

import base64
import json
from typing import Any, Dict, Optional

from pos_console.exceptions import ApiError
from pos_console.performance_logger import profile_function
from pos_console.repositories.base import ApiRepository


class AuthRepository(ApiRepository):

    @profile_function(name="Iniciar sesión en backend")
    def login(self, username: str, password: str) -> Dict[str, Any]:
        """
        POST /auth/login.

        Returns:
            {'user': {...}, 'token': '...'}

        Raises:
            ApiError: credenciales inválidas o respuesta sin token
        """
        data = self._post('/auth/login', {'username': username, 'password': password})
        if not isinstance(data, dict) or not data.get('token'):
            raise ApiError('Respuesta de login sin token')
        return data


def decode_token_role(token: Optional[str]) -> Optional[str]:
    """
    Lee el rol del payload del JWT (sin verificar la firma; la verificación
    es responsabilidad del backend).
    """
    if not token:
        return None
    try:
        payload_part = token.split('.')[1]
        padded = payload_part + '=' * (-len(payload_part) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode('ascii')))
    except (IndexError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get('role')
