from __future__ import annotations

from typing import Any


# Fallback used only when no saved menu file exists.
DEFAULT_MENU: dict[str, Any] = {
    "networkName": "My Network",
    "codes": {
        "*100#": {
            "response": "My Network Self Service\n1. My Balance\n2. Data Bundles\n0. Exit",
            "options": {
                "1": {
                    "response": "Balance: 0.00\n\n0. Main Menu",
                    "options": {
                        "0": {"goto": "*100#", "response": ""},
                    },
                },
                "2": {
                    "response": "No bundles configured.\n\n0. Main Menu",
                    "options": {
                        "0": {"goto": "*100#", "response": ""},
                    },
                },
                "0": {
                    "response": "Goodbye!",
                    "sessionEnd": True,
                },
            },
        },
    },
}
