"""CDP analytics delivery.

Events are posted in the background so a slow or failing CDP endpoint never
delays the USSD response. Failures are logged and dropped.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Mapping

import requests

from ussd_emulator.engine.core.models import PropertyValue


logger = logging.getLogger(__name__)


class NullDispatcher:
    """Used when CDP credentials are absent; every event is skipped."""

    def is_configured(self) -> bool:
        return False

    def dispatch(self, phone_number: str, event_id: str, properties: Mapping[str, PropertyValue]) -> None:
        return None

    def shutdown(self, wait: bool = True) -> None:
        return None


class CdpDispatcher:
    def __init__(
        self,
        api_key: str | None,
        pass_key: str | None,
        endpoint: str | None,
        timeout: float = 10.0,
        max_workers: int = 4,
    ):
        self.api_key = api_key
        self.pass_key = pass_key
        self.endpoint = endpoint
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cdp-dispatch")

    def is_configured(self) -> bool:
        return bool(self.api_key and self.pass_key and self.endpoint)

    def dispatch(self, phone_number: str, event_id: str, properties: Mapping[str, PropertyValue]) -> Future:
        payload = build_track_payload(phone_number, event_id, properties)
        return self._executor.submit(self._send, payload)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _send(self, payload: dict[str, Any]) -> bool:
        event_id = payload["eventId"]
        phone_number = payload["identity"]["value"]
        try:
            response = requests.post(
                str(self.endpoint),
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "x-api-key": str(self.api_key),
                    "x-api-passkey": str(self.pass_key),
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("[CDP] Event %s failed (non-fatal): %s", event_id, e)
            return False
        except Exception:
            logger.exception("[CDP] Event %s failed unexpectedly (non-fatal)", event_id)
            return False

        logger.info('[CDP] Event fired: "%s" for %s (%s)', event_id, phone_number, response.status_code)
        return True


def build_track_payload(phone_number: str, event_id: str, properties: Mapping[str, PropertyValue]) -> dict[str, Any]:
    return {
        "type": "track",
        "eventId": event_id,
        "identity": {"type": "primary", "name": "phone", "value": phone_number},
        "properties": dict(properties),
    }
