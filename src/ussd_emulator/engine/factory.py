from __future__ import annotations

from ussd_emulator.analytics.dispatcher import CdpDispatcher, NullDispatcher
from ussd_emulator.engine.session_engine import AnalyticsDispatcher, SessionEngine
from ussd_emulator.engine.session_store import InMemorySessionStore
from ussd_emulator.menu.config_store import MenuConfigStore
from ussd_emulator.settings import Settings


def build_dispatcher(settings: Settings) -> AnalyticsDispatcher:
    if not settings.cdp_configured:
        return NullDispatcher()
    return CdpDispatcher(
        api_key=settings.cdp_api_key,
        pass_key=settings.cdp_pass_key,
        endpoint=settings.cdp_endpoint,
        timeout=settings.cdp_timeout,
    )


def build_engine(settings: Settings, config_store: MenuConfigStore | None = None) -> SessionEngine:
    """Wire a session engine with an in-memory store and the configured collaborators."""

    return SessionEngine(
        store=InMemorySessionStore(),
        tree_provider=config_store or MenuConfigStore(settings.config_file),
        dispatcher=build_dispatcher(settings),
    )

