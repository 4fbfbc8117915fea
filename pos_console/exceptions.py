# ==============================================================================
# EXCEPCIONES DE LA CONSOLA
# ==============================================================================
# Errores que cruzan capas (repositorios → servicios → rutas).
# ValidationService devuelve los errores del borrador como diccionario
# campo → mensaje; DraftValidationError los transporta cuando se intenta
# enviar un borrador inválido.
# ==============================================================================

from typing import Dict, Optional


class ConsoleError(Exception):
    """Base de todos los errores de la consola."""
    pass


class ApiError(ConsoleError):
    """
    Respuesta no exitosa (no 2xx) o fallo de red al hablar con el backend.

    Attributes:
        status: Código HTTP (None si la petición no llegó a responder)
        body: Texto crudo de la respuesta
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = ''):
        super().__init__(message)
        self.status = status
        self.body = body


class AuthenticationExpiredError(ApiError):
    """El backend respondió 401: el token ya no es válido."""

    def __init__(self, body: str = ''):
        super().__init__(
            'Sesión expirada. Por favor, inicia sesión nuevamente.',
            status=401,
            body=body
        )


class SubmissionError(ConsoleError):
    """El envío de la transacción fue rechazado por el backend."""

    def __init__(self, status: Optional[int], body: str = ''):
        self.status = status
        self.body = body
        if status is None:
            message = f'Error de conexión: {body}'
        else:
            message = f'Error {status}: {body}'
        super().__init__(message)


class SubmissionInProgressError(ConsoleError):
    """Ya hay un envío en curso; no se permite un segundo envío."""
    pass


class DraftValidationError(ConsoleError):
    """El borrador no pasó la validación y no se envió."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__('El borrador tiene errores de validación')
        self.errors = errors
