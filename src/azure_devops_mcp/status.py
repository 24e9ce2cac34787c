"""Pull request and comment thread status translation.

Azure DevOps identifies statuses by integer code, and the REST API also
accepts and returns a camelCase wire name for each code. Tool arguments use
human-readable names.

Translation is strict when writing (an unknown name raises) and lenient when
reading (an unknown code reads as "Unknown"). Each direction is a single
table below.
"""

from enum import IntEnum


class PullRequestStatus(IntEnum):
    """Pull request status codes."""

    NOT_SET = 0
    ACTIVE = 1
    ABANDONED = 2
    COMPLETED = 3
    ALL = 4

    @property
    def wire_name(self) -> str:
        return _PULL_REQUEST_WIRE_NAMES[self]


class CommentThreadStatus(IntEnum):
    """Comment thread status codes."""

    UNKNOWN = 0
    ACTIVE = 1
    FIXED = 2
    WONT_FIX = 3
    CLOSED = 4
    BY_DESIGN = 5
    PENDING = 6

    @property
    def wire_name(self) -> str:
        return _THREAD_WIRE_NAMES[self]


_PULL_REQUEST_WIRE_NAMES = {
    PullRequestStatus.NOT_SET: "notSet",
    PullRequestStatus.ACTIVE: "active",
    PullRequestStatus.ABANDONED: "abandoned",
    PullRequestStatus.COMPLETED: "completed",
    PullRequestStatus.ALL: "all",
}

_THREAD_WIRE_NAMES = {
    CommentThreadStatus.UNKNOWN: "unknown",
    CommentThreadStatus.ACTIVE: "active",
    CommentThreadStatus.FIXED: "fixed",
    CommentThreadStatus.WONT_FIX: "wontFix",
    CommentThreadStatus.CLOSED: "closed",
    CommentThreadStatus.BY_DESIGN: "byDesign",
    CommentThreadStatus.PENDING: "pending",
}

# name -> code (write direction, case-sensitive)
PULL_REQUEST_STATUS_BY_NAME: dict[str, PullRequestStatus] = {
    "active": PullRequestStatus.ACTIVE,
    "abandoned": PullRequestStatus.ABANDONED,
    "completed": PullRequestStatus.COMPLETED,
    "all": PullRequestStatus.ALL,
}

# lowercased name -> code (write direction)
THREAD_STATUS_BY_NAME: dict[str, CommentThreadStatus] = {
    "unknown": CommentThreadStatus.UNKNOWN,
    "active": CommentThreadStatus.ACTIVE,
    "fixed": CommentThreadStatus.FIXED,
    "wontfix": CommentThreadStatus.WONT_FIX,
    "closed": CommentThreadStatus.CLOSED,
    "bydesign": CommentThreadStatus.BY_DESIGN,
    "pending": CommentThreadStatus.PENDING,
}

# code -> display name (read direction, total via default)
THREAD_STATUS_NAMES: dict[int, str] = {
    CommentThreadStatus.UNKNOWN: "Unknown",
    CommentThreadStatus.ACTIVE: "Active",
    CommentThreadStatus.FIXED: "Fixed",
    CommentThreadStatus.WONT_FIX: "WontFix",
    CommentThreadStatus.CLOSED: "Closed",
    CommentThreadStatus.BY_DESIGN: "ByDesign",
    CommentThreadStatus.PENDING: "Pending",
}

_THREAD_STATUS_BY_WIRE_NAME = {wire: code for code, wire in _THREAD_WIRE_NAMES.items()}


def string_to_pull_request_status(name: str) -> PullRequestStatus:
    """Translate a pull request status name.

    Raises:
        ValueError: If name is not exactly one of active/abandoned/completed/all
    """
    try:
        return PULL_REQUEST_STATUS_BY_NAME[name]
    except KeyError:
        raise ValueError(f"Invalid pull request status: {name}") from None


def string_to_thread_status(name: str) -> CommentThreadStatus:
    """Translate a thread status name, ignoring case.

    Raises:
        ValueError: If name is not one of the seven thread statuses
    """
    try:
        return THREAD_STATUS_BY_NAME[name.lower()]
    except KeyError:
        raise ValueError(f"Invalid thread status: {name}") from None


def thread_status_to_string(code: int) -> str:
    """Display name for a thread status code; unmapped codes read as "Unknown"."""
    return THREAD_STATUS_NAMES.get(code, "Unknown")


def thread_status_code(value: object) -> int | None:
    """Normalize a provider thread status to its integer code.

    The SDK hands back whatever the REST payload held: usually the wire name
    ("active", "wontFix"), sometimes the integer code.

    Returns:
        The integer code, or None if value is absent or not a status
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        code = _THREAD_STATUS_BY_WIRE_NAME.get(value)
        return int(code) if code is not None else None
    return None
