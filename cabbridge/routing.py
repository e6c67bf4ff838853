"""Role-based routing policy for peer-to-peer messages.

The default policy is hub-and-spoke with ``val`` as the hub: ``esc`` may not
message another ``esc`` unless mesh routing is explicitly allowed, and an
``observer`` may never send. Unknown roles are permitted.
"""

from __future__ import annotations

import json


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


class RoutingError(ValueError):
    """A role pair is not allowed by the routing policy."""

    reason = "routing forbidden"

    def __init__(self, from_role: str, to_role: str) -> None:
        super().__init__(f"{self.reason}: from={_quote(from_role)} to={_quote(to_role)}")
        self.from_role = from_role
        self.to_role = to_role


class EscToEscForbiddenError(RoutingError):
    """An esc tried to message another esc without the mesh override."""

    reason = "esc→esc routing forbidden by default (use --allow-mesh to override)"


class ObserverCannotSendError(RoutingError):
    """An observer tried to send a message."""

    reason = "observer role cannot send messages (observers are read-only sinks)"


def validate_send_pair(from_role: str, to_role: str, allow_mesh: bool = False) -> None:
    """Raise a RoutingError if from_role may not message to_role.

    ``allow_mesh`` relaxes only the esc→esc rule; observers can never send.
    """
    if from_role == "observer":
        raise ObserverCannotSendError(from_role, to_role)
    if from_role == "esc" and to_role == "esc" and not allow_mesh:
        raise EscToEscForbiddenError(from_role, to_role)