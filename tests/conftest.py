from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from ussd_emulator.engine.core.models import MenuTree
from ussd_emulator.engine.session_engine import SessionEngine
from ussd_emulator.engine.session_store import InMemorySessionStore


BANKING_MENU: dict[str, Any] = {
    "networkName": "Demo Net",
    "codes": {
        "*100#": {
            "response": "Menu\n1.Bal",
            "options": {
                "1": {"response": "Bal: 0", "options": {"0": {"goto": "*100#", "response": ""}}},
                "0": {"response": "Bye", "sessionEnd": True},
            },
        },
        "*120#": {
            "response": "Enter name",
            "isInput": True,
            "cdpEvent": {"eventId": "ussd_opened", "properties": {"code": "*120#", "name": "$input"}},
            "options": {
                "*": {
                    "response": "Enter city",
                    "isInput": True,
                    "options": {
                        "1": {"response": "City one"},
                        "*": {
                            "response": "Thanks",
                            "sessionEnd": True,
                            "cdpEvent": {
                                "eventId": "signup",
                                "properties": {"name": "$input_prev", "city": "$input", "extra": "$input_prev2", "step": 2},
                            },
                        },
                    },
                },
            },
        },
        "*130#": {
            "response": "Pick",
            "options": {
                "1": {"response": "Literal one"},
                "*": {"response": "Free text", "options": {"9": {"goto": "*999#", "response": "Dangling"}}},
            },
        },
        "*200#": {"response": "Info only", "sessionEnd": True, "cdpEvent": {"eventId": "info"}},
    },
}


@dataclass
class StaticTreeProvider:
    tree: MenuTree

    def get_current_tree(self) -> MenuTree:
        return self.tree


@dataclass
class RecordingDispatcher:
    configured: bool = True
    fail: bool = False
    events: list[tuple[str, str, dict]] = field(default_factory=list)

    def is_configured(self) -> bool:
        return self.configured

    def dispatch(self, phone_number, event_id, properties) -> None:
        if self.fail:
            raise RuntimeError("cdp down")
        self.events.append((phone_number, event_id, dict(properties)))


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def tree() -> MenuTree:
    return MenuTree.from_dict(BANKING_MENU)


@pytest.fixture
def provider(tree) -> StaticTreeProvider:
    return StaticTreeProvider(tree)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def engine(store, provider, dispatcher, clock) -> SessionEngine:
    return SessionEngine(store=store, tree_provider=provider, dispatcher=dispatcher, clock=clock)
