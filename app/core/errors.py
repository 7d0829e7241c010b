# app/core/errors.py
"""
Errores de dominio.

Los servicios lanzan estas excepciones y `app.main` las traduce a
respuestas JSON `{"detail": ...}` con su status. Los routers no arman
HTTPException para fallos de negocio.
"""


class FeedError(Exception):
    status_code: int = 400
    default_detail: str = "bad request"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(FeedError):
    status_code = 400
    default_detail = "invalid input"


class DuplicateUser(FeedError):
    status_code = 400
    default_detail = "user already exists"


class InvalidCredentials(FeedError):
    # mismo mensaje para usuario inexistente y password incorrecto
    status_code = 400
    default_detail = "invalid credentials"


class Unauthenticated(FeedError):
    status_code = 401
    default_detail = "invalid token"


class Unauthorized(FeedError):
    status_code = 401
    default_detail = "not authorized"


class NotFound(FeedError):
    status_code = 404
    default_detail = "not found"


class StorageError(FeedError):
    status_code = 500
    default_detail = "internal error"
