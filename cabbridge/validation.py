"""Strict and lenient validation, encoding and decoding of messages."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Optional, Union

from cabbridge.message import (
    MESSAGE_FIELDS,
    METADATA_FIELDS,
    SCHEMA_VERSION_V2,
    Message,
    MessageStatus,
    MessageType,
)
from cabbridge.security import InvalidSessionIDError, validate_session_id

_MESSAGE_ID_PATTERN = re.compile(r"msg-[a-z0-9]{12}")
_VALID_TYPES = frozenset(t.value for t in MessageType)
_VALID_STATUSES = frozenset(s.value for s in MessageStatus)
_TOP_FIELDS = frozenset(name.lower() for name in MESSAGE_FIELDS)
_META_FIELDS = frozenset(name.lower() for name in METADATA_FIELDS)
_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)

Payload = Union[bytes, bytearray, memoryview, str]


class MessageValidationError(ValueError):
    """A message failed decoding or validation."""

    description = "invalid message"

    def __init__(self, detail: str = "") -> None:
        super().__init__(f"{self.description}: {detail}" if detail else self.description)
        self.detail = detail


class InvalidMessageIDError(MessageValidationError):
    description = "invalid message id: must match ^msg-[a-z0-9]{12}$"


class InvalidTypeError(MessageValidationError):
    description = "invalid message type"


class InvalidStatusError(MessageValidationError):
    description = "invalid message status"


class ContentTooLargeError(MessageValidationError):
    description = "message content exceeds MaxMessageBytes"


class UnknownFieldError(MessageValidationError):
    description = "message JSON contains unknown field"


class MissingRequiredError(MessageValidationError):
    description = "message missing required field"


class UnsupportedVersionError(MessageValidationError):
    description = "unsupported schemaVersion"


def _validate_common(message: Optional[Message], max_content_bytes: int) -> None:
    """Every check except membership of the type enum."""
    if message is None:
        raise MissingRequiredError("message is nil")
    version = message.schema_version
    if isinstance(version, bool) or version not in (SCHEMA_VERSION_V2, 1):
        raise UnsupportedVersionError(f"got schemaVersion={version} (supported: 1, 2)")
    if not isinstance(message.id, str) or not _MESSAGE_ID_PATTERN.fullmatch(message.id):
        raise InvalidMessageIDError(f"got {json.dumps(str(message.id))}")
    for label, value in (("from", message.from_), ("to", message.to)):
        try:
            validate_session_id(value)
        except InvalidSessionIDError as exc:
            raise MessageValidationError(f"field {label}: {exc}") from exc
    reply = message.in_reply_to
    if reply is not None and (not isinstance(reply, str) or not _MESSAGE_ID_PATTERN.fullmatch(reply)):
        raise InvalidMessageIDError(f"inReplyTo={json.dumps(str(reply))}")
    if message.status not in _VALID_STATUSES:
        raise InvalidStatusError(
            f"got {json.dumps(str(message.status))} (allowed: pending|processing|completed|failed)"
        )
    size = len(message.content.encode("utf-8", "surrogatepass"))
    if max_content_bytes > 0 and size > max_content_bytes:
        raise ContentTooLargeError(f"{size} > {max_content_bytes}")
    if not message.timestamp:
        raise MissingRequiredError("timestamp empty")


def validate(message: Optional[Message], max_content_bytes: int) -> None:
    """Raise a MessageValidationError unless message satisfies every constraint.

    A max_content_bytes of zero or less disables the size limit.
    """
    _validate_common(message, max_content_bytes)
    if message.type not in _VALID_TYPES:
        raise InvalidTypeError(
            f"got {json.dumps(str(message.type))} (allowed: query|response|ping|notify|event|ack)"
        )


def encode_strict(message: Message, max_content_bytes: int) -> bytes:
    """Validate message and return its indented JSON encoding."""
    validate(message, max_content_bytes)
    text = json.dumps(message.to_dict(), indent=2, ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES:
        text = text.replace(char, escaped)
    return text.encode("utf-8", "replace")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON literal {name}")


def _load(data: Payload, *, whole: bool) -> Any:
    if isinstance(data, (bytes, bytearray, memoryview)):
        text = bytes(data).decode("utf-8", errors="replace")
    else:
        text = data
    decoder = json.JSONDecoder(parse_constant=_reject_constant)
    try:
        if whole:
            return decoder.decode(text)
        value, _ = decoder.raw_decode(text.lstrip(" \t\r\n"))
        return value
    except ValueError as exc:
        raise MessageValidationError(f"decode: {exc}") from exc


def _find_unknown_field(payload: Mapping) -> Optional[str]:
    for key, value in payload.items():
        folded = str(key).lower()
        if folded not in _TOP_FIELDS:
            return str(key)
        if folded == "metadata" and isinstance(value, Mapping):
            for inner in value:
                if str(inner).lower() not in _META_FIELDS:
                    return str(inner)
    return None


def _build(payload: Any) -> Message:
    try:
        message = Message.from_dict(payload)
    except ValueError as exc:
        raise MessageValidationError(f"decode: {exc}") from exc
    if message.schema_version == 1:
        message.apply_v1_defaults()
    return message


def decode_strict(data: Payload, max_content_bytes: int) -> Message:
    """Decode the first JSON value in data, rejecting unknown fields and types."""
    payload = _load(data, whole=False)
    if isinstance(payload, Mapping):
        unknown = _find_unknown_field(payload)
        if unknown is not None:
            raise UnknownFieldError(f"json: unknown field {json.dumps(unknown)}")
    message = _build(payload)
    validate(message, max_content_bytes)
    return message


def decode_lenient(data: Payload, max_content_bytes: int) -> Message:
    """Decode data, tolerating unknown fields and unknown message types."""
    message = _build(_load(data, whole=True))
    _validate_common(message, max_content_bytes)
    return message