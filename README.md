# cabbridge

Building blocks for a file-based bridge that lets several command-line agent
sessions exchange messages through a shared data directory.

The package contains five modules:

- **`cabbridge.security`** validates session and team IDs before an ID is used
  as a path component. It also checks file ownership and enforces directory
  permissions idempotently.
- **`cabbridge.routing`** holds the default hub-and-spoke role policy.
- **`cabbridge.config`** resolves settings from defaults, an optional
  `config.json` in the data directory, and `CAB_*` environment variables.
- **`cabbridge.message`** defines the v2 message schema, the v1 defaults and
  message ID generation.
- **`cabbridge.validation`** does strict and lenient JSON encoding, decoding
  and validation of messages.

## Installation

```
pip install cabbridge
```

It needs Python 3.10 or later and has no third-party dependencies. The
ownership and permission checks rely on POSIX file ownership.

## Security checks

```python
from cabbridge.security import (
    validate_session_id, validate_team_id, check_ownership, enforce_dir_perms,
    InvalidSessionIDError,
)

validate_session_id("abc123ef")       # returns the ID unchanged
try:
    validate_session_id("../../etc/passwd")
except InvalidSessionIDError as exc:
    print(exc)

validate_team_id("team-1")            # ^[a-z0-9][a-z0-9_-]{0,31}$
check_ownership("/some/file")         # raises OwnershipMismatchError if owned by another user
enforce_dir_perms("/some/dir", 0o700) # chmods only if the bits differ
```

The rules for each check are:

- **Session IDs** must match `^[a-z0-9]{6,32}$`. Anything else raises
  `InvalidSessionIDError`.
- **Team IDs** must match `^[a-z0-9][a-z0-9_-]{0,31}$`. Anything else raises
  `InvalidTeamIDError`.
- **`check_ownership`**:
  - It raises `FileNotFoundError` for a missing path.
  - When the process runs as root, it skips the check and prints a warning to
    stderr.
  - It raises `SecurityError` on platforms without user IDs.
- **`enforce_dir_perms`** raises `FileNotFoundError` for a missing path and
  `NotADirectoryError` when the path is not a directory.

`InvalidSessionIDError`, `InvalidTeamIDError` and `OwnershipMismatchError` are
all subclasses of `SecurityError`. The two ID errors are also `ValueError`s.

## Routing policy

```python
from cabbridge.routing import validate_send_pair, EscToEscForbiddenError

validate_send_pair("val", "esc")                   # allowed
validate_send_pair("esc", "esc", allow_mesh=True)  # allowed with the mesh override
try:
    validate_send_pair("esc", "esc")
except EscToEscForbiddenError as exc:
    print(exc)  # the message mentions --allow-mesh
```

The policy has three rules:

- `observer` can never send, and `allow_mesh` does not change that. The error
  is `ObserverCannotSendError`.
- `esc` → `esc` is refused unless `allow_mesh` is true.
- Every other pair is allowed, including unknown roles and `neutral`.

Both errors are subclasses of `RoutingError`, which is itself a `ValueError`.

## Configuration

```python
from cabbridge.config import load, default_config

cfg, warnings = load()
print(cfg.data_dir, cfg.stale_seconds, cfg.auto_gc_hours)
for w in warnings:
    print("warning:", w)
```

`Config` fields and their defaults:

| field                  | default                          | environment variable       |
|------------------------|----------------------------------|----------------------------|
| `data_dir`             | `~/.claude/cli-agents-bridge`    | `CAB_DATA_DIR`             |
| `stale_seconds`        | 300                              | `CAB_STALE_SECONDS`        |
| `poll_interval_ms`     | 1000                             | `CAB_POLL_INTERVAL_MS`     |
| `max_blocking_seconds` | 540                              | `CAB_MAX_BLOCKING_SECONDS` |
| `max_inbox_size`       | 100                              | `CAB_MAX_INBOX_SIZE`       |
| `max_message_bytes`    | 65536                            | `CAB_MAX_MESSAGE_BYTES`    |
| `retention_days`       | 7                                | `CAB_RETENTION_DAYS`       |
| `heartbeat_tick_ms`    | 30000                            | `CAB_HEARTBEAT_TICK_MS`    |
| `auto_gc_hours`        | 24                               | `CAB_AUTO_GC_HOURS`        |

Settings resolve in three layers, and each later layer wins:

1. **Built-in defaults**, as returned by `default_config()`.
2. **`<data_dir>/config.json`**, using the field names above as keys.
   - The file is optional.
   - Zero and empty values in the file are ignored.
   - A `_comment` key is accepted and ignored.
   - Any other unknown key makes `load()` raise `ConfigError`, and so does
     malformed JSON.
3. **Environment variables**.
   - `CAB_DATA_DIR` also decides where `config.json` is read from.
   - A value that is not an integer is ignored and produces a warning.
   - `CAB_AUTO_GC_HOURS=0` does take effect.

A relative data directory is resolved to an absolute path, and a warning says
so.

## Messages

```python
from cabbridge.message import Message, Metadata, generate_message_id
from cabbridge.validation import encode_strict, decode_strict, decode_lenient

msg = Message(
    id=generate_message_id(),          # "msg-" + 12 hex characters
    schema_version=2,
    from_="abc123ef",
    from_role="val",
    from_agent_name="VAL-main",
    to="def456ab",
    to_role="esc",
    type="query",
    timestamp="2026-05-24T18:00:00Z",
    status="pending",
    content="hello",
    metadata=Metadata(from_project="demo", processing_state="pending"),
)
data = encode_strict(msg, 65536)       # indented JSON bytes, keys in canonical order
same = decode_strict(data, 65536)
```

`MessageType` lists the known types: `query`, `response`, `ping`, `notify`,
`event` and `ack`. `MessageStatus` lists the statuses: `pending`,
`processing`, `completed` and `failed`. Store their `.value` strings in a
`Message`.

`Message.to_dict()` and `Message.from_dict()` convert to and from the wire
shape. The wire keys are `id`, `schemaVersion`, `from`, `fromRole`,
`fromAgentName`, `to`, `toRole`, `type`, `timestamp`, `status`, `content`,
`inReplyTo` and `metadata`.

For a message with `schemaVersion` 1, both decoders call
`apply_v1_defaults()`. It sets empty roles to `neutral` and an empty
`processingState` to `pending`.

### Validation

`validate(message, max_content_bytes)` checks the following:

- `schemaVersion` is 1 or 2.
- The ID and any `inReplyTo` match `^msg-[a-z0-9]{12}$`.
- `from` and `to` are valid session IDs.
- The status and the type are known values.
- The content fits within `max_content_bytes` UTF-8 bytes. A value of 0 or
  less disables this limit.
- The timestamp is not empty.

The two decoders differ in what they accept:

- `decode_strict` rejects unknown JSON fields, including unknown `metadata`
  fields, with `UnknownFieldError`. It rejects unknown types with
  `InvalidTypeError`.
- `decode_lenient` accepts unknown fields and unknown types. It still enforces
  every other check.

Every failure raises a subclass of `MessageValidationError`, which is a
`ValueError`. The subclasses are:

- `InvalidMessageIDError`
- `InvalidTypeError`
- `InvalidStatusError`
- `ContentTooLargeError`
- `UnknownFieldError`
- `MissingRequiredError`
- `UnsupportedVersionError`

## What this package does not do

This package only provides the primitives listed above. It does not include:

- a command-line tool
- session registration or heartbeats
- inbox or outbox delivery or polling
- cleanup or archiving of session directories

An application that moves messages between sessions has to supply those parts
itself.