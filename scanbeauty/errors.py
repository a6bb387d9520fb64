"""
Boundary error handling: visitors get a short Italian message, the logs
get the details.
"""

import logging

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Si è verificato un errore. Riprova più tardi."
NETWORK_ERROR = "Errore di connessione. Verifica la tua connessione internet."

# PostgreSQL SQLSTATE → message
_PG_MESSAGES = {
    "23505": "Questi dati sono già stati registrati.",
    "42501": "Accesso non autorizzato.",
    "23503": "Riferimento dati non valido.",
    "23514": "I dati inseriti non sono validi.",
}


def _sqlstate(exc: BaseException) -> str | None:
    orig = getattr(exc, "orig", None)
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def user_friendly_error(exc: BaseException) -> str:
    """Map an exception to a message safe to show to visitors."""
    if isinstance(exc, DBAPIError):
        code = _sqlstate(exc)
        if code in _PG_MESSAGES:
            return _PG_MESSAGES[code]
        if isinstance(exc, IntegrityError):
            return _PG_MESSAGES["23505"]
        if exc.connection_invalidated:
            return NETWORK_ERROR

    if isinstance(exc, (ConnectionError, TimeoutError)):
        return NETWORK_ERROR

    message = str(exc).lower()
    if "policy" in message or "permission denied" in message:
        return "Operazione non consentita."
    if "network" in message or "connection refused" in message:
        return NETWORK_ERROR

    return GENERIC_ERROR


def log_error(exc: BaseException, context: str) -> None:
    if isinstance(exc, SQLAlchemyError):
        logger.error(f"[{context}] database error: {exc}", exc_info=exc)
    else:
        logger.error(f"[{context}] {type(exc).__name__}: {exc}", exc_info=exc)
