from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from ussd_emulator.engine.core.errors import MenuConfigError


PropertyValue = Union[str, int, float, bool]

WILDCARD = "*"
DEFAULT_NETWORK_NAME = "Network"


@dataclass(frozen=True)
class CdpEvent:
    event_id: str
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, path: str = "cdpEvent") -> CdpEvent:
        if not isinstance(data, dict):
            raise MenuConfigError(f"{path} must be an object")

        event_id = data.get("eventId")
        if not isinstance(event_id, str) or not event_id.strip():
            raise MenuConfigError(f"{path}.eventId must be a non-empty string")

        raw_props = data.get("properties") or {}
        if not isinstance(raw_props, dict):
            raise MenuConfigError(f"{path}.properties must be an object")

        properties: dict[str, PropertyValue] = {}
        for key, value in raw_props.items():
            if not isinstance(value, (str, int, float, bool)):
                raise MenuConfigError(f"{path}.properties.{key} must be a string, number or boolean")
            properties[str(key)] = value

        return cls(event_id=event_id, properties=properties)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"eventId": self.event_id}
        if self.properties:
            data["properties"] = dict(self.properties)
        return data


@dataclass(frozen=True)
class MenuNode:
    response: str = ""
    options: Mapping[str, MenuNode] = field(default_factory=dict)
    is_input: bool = False
    cdp_event: CdpEvent | None = None
    session_end: bool = False
    goto: str | None = None

    def match(self, user_input: str) -> tuple[MenuNode | None, bool]:
        """Pick the child for `user_input`.

        A literal key always wins over the wildcard. Returns `(node, is_wildcard)`;
        `node` is None when neither matches.
        """

        if user_input in self.options:
            return self.options[user_input], False
        if WILDCARD in self.options:
            return self.options[WILDCARD], True
        return None, False

    @classmethod
    def from_dict(cls, data: Any, path: str = "node") -> MenuNode:
        if not isinstance(data, dict):
            raise MenuConfigError(f"{path} must be an object")

        response = data.get("response", "")
        if not isinstance(response, str):
            raise MenuConfigError(f"{path}.response must be a string")

        raw_options = data.get("options") or {}
        if not isinstance(raw_options, dict):
            raise MenuConfigError(f"{path}.options must be an object")
        options = {str(key): cls.from_dict(child, f"{path}.options[{key!r}]") for key, child in raw_options.items()}

        for flag in ("isInput", "sessionEnd"):
            if flag in data and not isinstance(data[flag], bool):
                raise MenuConfigError(f"{path}.{flag} must be a boolean")

        goto = data.get("goto")
        if goto is not None and (not isinstance(goto, str) or not goto):
            raise MenuConfigError(f"{path}.goto must be a non-empty string")

        cdp_event = None
        if data.get("cdpEvent") is not None:
            cdp_event = CdpEvent.from_dict(data["cdpEvent"], f"{path}.cdpEvent")

        return cls(
            response=response,
            options=options,
            is_input=bool(data.get("isInput", False)),
            cdp_event=cdp_event,
            session_end=bool(data.get("sessionEnd", False)),
            goto=goto,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"response": self.response}
        if self.options:
            data["options"] = {key: child.to_dict() for key, child in self.options.items()}
        if self.is_input:
            data["isInput"] = True
        if self.cdp_event is not None:
            data["cdpEvent"] = self.cdp_event.to_dict()
        if self.session_end:
            data["sessionEnd"] = True
        if self.goto:
            data["goto"] = self.goto
        return data


@dataclass(frozen=True)
class MenuTree:
    codes: Mapping[str, MenuNode]
    network_name: str | None = None

    @property
    def display_network_name(self) -> str:
        return self.network_name or DEFAULT_NETWORK_NAME

    def root(self, dial_code: str) -> MenuNode | None:
        return self.codes.get(dial_code)

    @classmethod
    def from_dict(cls, data: Any) -> MenuTree:
        if not isinstance(data, dict):
            raise MenuConfigError("menu config must be an object")

        raw_codes = data.get("codes")
        if not isinstance(raw_codes, dict):
            raise MenuConfigError("Missing or invalid 'codes' field")

        network_name = data.get("networkName")
        if network_name is not None and not isinstance(network_name, str):
            raise MenuConfigError("networkName must be a string")

        codes = {str(code): MenuNode.from_dict(node, f"codes[{code!r}]") for code, node in raw_codes.items()}
        return cls(codes=codes, network_name=network_name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"codes": {code: node.to_dict() for code, node in self.codes.items()}}
        if self.network_name is not None:
            data["networkName"] = self.network_name
        return data


@dataclass
class Session:
    session_id: str
    phone_number: str
    current_node: MenuNode
    root_code: str
    started_at: float
    history: list[str] = field(default_factory=list)
    input_buffer: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SessionResult:
    session_id: str | None
    response: str
    session_active: bool
    requires_input: bool
    network_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "response": self.response,
            "sessionActive": self.session_active,
            "requiresInput": self.requires_input,
            "networkName": self.network_name,
        }


@dataclass(frozen=True)
class EndResult:
    deleted: bool

    def to_dict(self) -> dict[str, Any]:
        return {"deleted": self.deleted}
