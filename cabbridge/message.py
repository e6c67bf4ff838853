"""Message schema v2: the JSON shape of bridge messages on disk."""

from __future__ import annotations

import secrets
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

SCHEMA_VERSION_V2 = 2

NEUTRAL_ROLE = "neutral"

# Wire names in canonical order; writers emit keys in exactly this order.
MESSAGE_FIELDS = (
    "id",
    "schemaVersion",
    "from",
    "fromRole",
    "fromAgentName",
    "to",
    "toRole",
    "type",
    "timestamp",
    "status",
    "content",
    "inReplyTo",
    "metadata",
)
METADATA_FIELDS = ("fromProject", "processingState")

_MESSAGE_ATTRS = dict(
    zip(
        MESSAGE_FIELDS,
        (
            "id",
            "schema_version",
            "from_",
            "from_role",
            "from_agent_name",
            "to",
            "to_role",
            "type",
            "timestamp",
            "status",
            "content",
            "in_reply_to",
            "metadata",
        ),
    )
)
_METADATA_ATTRS = dict(zip(METADATA_FIELDS, ("from_project", "processing_state")))


class MessageType(str, Enum):
    """Known message types. ``ack`` is an automatic delivery receipt."""

    QUERY = "query"
    RESPONSE = "response"
    PING = "ping"
    NOTIFY = "notify"
    EVENT = "event"
    ACK = "ack"


class MessageStatus(str, Enum):
    """Message lifecycle states; ``failed`` is reserved for retries."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _fold(data: Any, attrs: Dict[str, str], what: str, nullable: FrozenSet[str] = frozenset()) -> Dict[str, Any]:
    """Map wire keys (matched case-insensitively) to attribute names."""
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    lookup = {wire.lower(): attr for wire, attr in attrs.items()}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        attr = lookup.get(str(key).lower())
        if attr is None:
            continue
        if value is None and attr not in nullable:
            continue  # null leaves the field at its current value
        values[attr] = value
    return values


def _text(values: Dict[str, Any], attr: str, wire: str) -> str:
    value = values.get(attr, "")
    if not isinstance(value, str):
        raise ValueError(f"field {wire!r} must be a string")
    return value


@dataclass
class Metadata:
    """Routing and observability fields kept out of the top-level schema."""

    from_project: str = ""
    processing_state: str = ""


def _metadata_from_dict(data: Any) -> Metadata:
    values = _fold(data, _METADATA_ATTRS, "metadata")
    return Metadata(
        from_project=_text(values, "from_project", "fromProject"),
        processing_state=_text(values, "processing_state", "processingState"),
    )


@dataclass
class Message:
    """A bridge message as stored in inbox and outbox files."""

    id: str = ""
    schema_version: int = SCHEMA_VERSION_V2
    from_: str = ""
    from_role: str = ""
    from_agent_name: str = ""
    to: str = ""
    to_role: str = ""
    type: str = ""
    timestamp: str = ""
    status: str = ""
    content: str = ""
    in_reply_to: Optional[str] = None
    metadata: Metadata = field(default_factory=Metadata)

    def apply_v1_defaults(self) -> None:
        """Fill fields that v1 messages lack with safe defaults."""
        if not self.from_role:
            self.from_role = NEUTRAL_ROLE
        if not self.to_role:
            self.to_role = NEUTRAL_ROLE
        if not self.metadata.processing_state:
            self.metadata.processing_state = MessageStatus.PENDING.value

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire representation with keys in canonical order."""
        return {
            "id": self.id,
            "schemaVersion": self.schema_version,
            "from": self.from_,
            "fromRole": _plain(self.from_role),
            "fromAgentName": self.from_agent_name,
            "to": self.to,
            "toRole": _plain(self.to_role),
            "type": _plain(self.type),
            "timestamp": self.timestamp,
            "status": _plain(self.status),
            "content": self.content,
            "inReplyTo": self.in_reply_to,
            "metadata": {
                "fromProject": self.metadata.from_project,
                "processingState": _plain(self.metadata.processing_state),
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Message":
        """Build a message from its wire representation.

        Keys match case-insensitively and unknown keys are ignored; missing
        fields take empty values (schemaVersion 0). A value of the wrong JSON
        type raises ValueError.
        """
        values = _fold(data, _MESSAGE_ATTRS, "message", nullable=frozenset({"in_reply_to"}))
        version = values.get("schema_version", 0)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValueError("field 'schemaVersion' must be an integer")
        in_reply_to = values.get("in_reply_to")
        if in_reply_to is not None and not isinstance(in_reply_to, str):
            raise ValueError("field 'inReplyTo' must be a string or null")
        return cls(
            id=_text(values, "id", "id"),
            schema_version=version,
            from_=_text(values, "from_", "from"),
            from_role=_text(values, "from_role", "fromRole"),
            from_agent_name=_text(values, "from_agent_name", "fromAgentName"),
            to=_text(values, "to", "to"),
            to_role=_text(values, "to_role", "toRole"),
            type=_text(values, "type", "type"),
            timestamp=_text(values, "timestamp", "timestamp"),
            status=_text(values, "status", "status"),
            content=_text(values, "content", "content"),
            in_reply_to=in_reply_to,
            metadata=_metadata_from_dict(values.get("metadata")),
        )


def generate_message_id() -> str:
    """Return a new random ID of the form msg-<12 hex chars>."""
    return "msg-" + secrets.token_hex(6)