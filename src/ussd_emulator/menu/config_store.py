from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any

from ussd_emulator.engine.core.errors import MenuConfigError
from ussd_emulator.engine.core.models import MenuTree
from ussd_emulator.menu.defaults import DEFAULT_MENU


logger = logging.getLogger(__name__)


def default_tree() -> MenuTree:
    return MenuTree.from_dict(copy.deepcopy(DEFAULT_MENU))


class MenuConfigStore:
    """Holds the active menu tree and mirrors it to a JSON file.

    Replacing the tree does not touch live sessions: they keep the nodes they
    were on, while `goto` lookups see the new tree.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._tree = self._load_from_disk()

    def get_current_tree(self) -> MenuTree:
        with self._lock:
            return self._tree

    def update(self, codes: Any, network_name: Any = None) -> MenuTree:
        if not isinstance(codes, dict):
            raise MenuConfigError("Missing or invalid 'codes' field")

        with self._lock:
            name = network_name if isinstance(network_name, str) else self._tree.network_name
            tree = MenuTree.from_dict({"codes": codes, "networkName": name})
            self._tree = tree

        self._save_to_disk(tree)
        return tree

    def reset(self) -> MenuTree:
        try:
            self.path.unlink()
            logger.info("[USSD] %s deleted, reverted to defaults", self.path.name)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("[USSD] Could not delete %s: %s", self.path, e)

        tree = default_tree()
        with self._lock:
            self._tree = tree
        return tree

    def _load_from_disk(self) -> MenuTree:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            tree = MenuTree.from_dict(raw)
        except FileNotFoundError:
            logger.info("[USSD] No %s found, using built-in defaults", self.path.name)
            return default_tree()
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and MenuConfigError are both ValueErrors.
            logger.warning("[USSD] Ignoring unreadable %s (%s), using built-in defaults", self.path.name, e)
            return default_tree()

        logger.info("[USSD] Loaded config from %s", self.path.name)
        return tree

    def _save_to_disk(self, tree: MenuTree) -> None:
        try:
            self.path.write_text(json.dumps(tree.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
            logger.info("[USSD] Config saved to %s", self.path.name)
        except OSError as e:
            logger.warning("[USSD] Could not write %s: %s", self.path, e)
