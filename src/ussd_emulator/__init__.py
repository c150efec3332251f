"""Server-side USSD menu interpreter for the phone emulator."""

from ussd_emulator.engine.core.errors import (
    EmptyFieldError,
    MalformedRequestError,
    MenuConfigError,
    MissingFieldError,
    SessionNotFoundError,
    UssdError,
)
from ussd_emulator.engine.core.models import MenuNode, MenuTree, SessionResult
from ussd_emulator.engine.session_engine import SessionEngine

__all__ = [
    "EmptyFieldError",
    "MalformedRequestError",
    "MenuConfigError",
    "MenuNode",
    "MenuTree",
    "MissingFieldError",
    "SessionEngine",
    "SessionNotFoundError",
    "SessionResult",
    "UssdError",
]
