from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol, Sequence

from ussd_emulator.engine.core.errors import (
    EmptyFieldError,
    MalformedRequestError,
    MissingFieldError,
    SessionNotFoundError,
)
from ussd_emulator.engine.core.models import (
    CdpEvent,
    EndResult,
    MenuNode,
    MenuTree,
    PropertyValue,
    Session,
    SessionResult,
)
from ussd_emulator.engine.placeholders import resolve_properties
from ussd_emulator.engine.session_store import SessionStore


logger = logging.getLogger(__name__)

INVALID_OPTION_NOTICE = "Invalid option."


class TreeProvider(Protocol):
    def get_current_tree(self) -> MenuTree: ...


class AnalyticsDispatcher(Protocol):
    def is_configured(self) -> bool: ...

    def dispatch(self, phone_number: str, event_id: str, properties: Mapping[str, PropertyValue]) -> None: ...


def generate_session_id() -> str:
    return f"ussd_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


def _check_text(value: Any, name: str) -> None:
    if value is not None and not isinstance(value, str):
        raise MalformedRequestError(f"'{name}' must be a string")


def _normalize_input(value: Any) -> str:
    if value is None:
        raise MissingFieldError("input")
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedRequestError("'input' must be a string")
    text = str(value)
    if text == "":
        raise EmptyFieldError("input")
    return text


@dataclass
class SessionEngine:
    """Walks a USSD menu tree one input at a time.

    Unknown dial codes and unmatched inputs are ordinary results carrying
    guidance text. Only bad requests and unknown session ids raise.
    """

    store: SessionStore
    tree_provider: TreeProvider
    dispatcher: AnalyticsDispatcher
    clock: Callable[[], float] = time.time
    id_factory: Callable[[], str] = field(default=generate_session_id)

    def start_session(self, phone_number: str | None, dial_code: str | None) -> SessionResult:
        _check_text(phone_number, "phoneNumber")
        _check_text(dial_code, "dialCode")
        if not phone_number or not dial_code:
            raise MissingFieldError("phoneNumber", "dialCode")

        tree = self.tree_provider.get_current_tree()
        network_name = tree.display_network_name

        root = tree.root(dial_code)
        if root is None:
            logger.info("[USSD] Unknown dial code %s from %s", dial_code, phone_number)
            return SessionResult(
                session_id=None,
                response=f"Service unavailable.\n{dial_code} is not a recognised service.",
                session_active=False,
                requires_input=False,
                network_name=network_name,
            )

        session = Session(
            session_id=self.id_factory(),
            phone_number=phone_number,
            current_node=root,
            root_code=dial_code,
            started_at=self.clock(),
        )

        self._fire_event(session.phone_number, root.cdp_event, session.input_buffer)

        active = not root.session_end
        if active:
            self.store.put(session)
            logger.info("[USSD] Session %s started on %s for %s", session.session_id, dial_code, phone_number)

        return self._result(session.session_id if active else None, root, network_name)

    def continue_session(self, session_id: str | None, user_input: Any) -> SessionResult:
        _check_text(session_id, "sessionId")
        if not session_id:
            raise MissingFieldError("sessionId")
        text = _normalize_input(user_input)

        tree = self.tree_provider.get_current_tree()
        network_name = tree.display_network_name

        with self.store.locked(session_id):
            session = self.store.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)

            current = session.current_node
            next_node, is_wildcard = current.match(text)

            if next_node is None:
                return SessionResult(
                    session_id=session_id,
                    response=f"{INVALID_OPTION_NOTICE}\n\n{current.response}",
                    session_active=True,
                    requires_input=current.is_input,
                    network_name=network_name,
                )

            if is_wildcard:
                session.input_buffer.append(text)

            resolved = self._follow_goto(next_node, tree)

            session.history.append(text)
            session.current_node = resolved

            self._fire_event(session.phone_number, resolved.cdp_event, session.input_buffer)

            active = not resolved.session_end
            if not active:
                self.store.delete(session_id)
                logger.info("[USSD] Session %s ended after %d input(s)", session_id, len(session.history))

        return self._result(session_id if active else None, resolved, network_name)

    def end_session(self, session_id: str | None) -> EndResult:
        _check_text(session_id, "sessionId")
        if not session_id:
            raise MissingFieldError("sessionId")
        with self.store.locked(session_id):
            deleted = self.store.delete(session_id)
        if deleted:
            logger.info("[USSD] Session %s closed by caller", session_id)
        return EndResult(deleted=deleted)

    @staticmethod
    def _follow_goto(node: MenuNode, tree: MenuTree) -> MenuNode:
        # Looked up in the tree as it is now, which may differ from the one the session started on.
        if not node.goto:
            return node
        target = tree.root(node.goto)
        if target is None:
            logger.warning("[USSD] goto target %s is not configured, staying on matched node", node.goto)
            return node
        return target

    def _fire_event(self, phone_number: str, event: CdpEvent | None, input_buffer: Sequence[str]) -> None:
        if event is None:
            return
        try:
            if not self.dispatcher.is_configured():
                logger.info('[USSD] CDP not configured, skipping event: "%s"', event.event_id)
                return
            properties = resolve_properties(event.properties, input_buffer)
            self.dispatcher.dispatch(phone_number, event.event_id, properties)
        except Exception as e:
            logger.warning("[USSD] CDP event %s failed (non-fatal): %s", event.event_id, e)

    @staticmethod
    def _result(session_id: str | None, node: MenuNode, network_name: str) -> SessionResult:
        return SessionResult(
            session_id=session_id,
            response=node.response,
            session_active=not node.session_end,
            requires_input=node.is_input,
            network_name=network_name,
        )
