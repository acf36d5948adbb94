"""Recipient partitioning, batching and message building for join alerts."""

from collections.abc import Iterable, Iterator

from src.tm_notify.domain.constants import PUSH_ALERT_TITLE, QUEUE_JOIN_EVENT
from src.tm_notify.domain.models import Device, PushMessage, Recipients


def partition_recipients(devices: Iterable[Device], joining_user_id: str) -> Recipients:
    """Split push tokens by the two alert preferences.

    A device can land in both groups. Devices with both preferences off,
    blank tokens, the joining user's own devices and repeated tokens are
    dropped.
    """
    recipients = Recipients()
    seen: set[str] = set()
    for device in devices:
        token = device.push_token.strip()
        if not token or token in seen or device.user_id == joining_user_id:
            continue
        seen.add(token)
        if device.wants_background:
            recipients.background_tokens.append(token)
        if device.wants_foreground:
            recipients.foreground_tokens.append(token)
    return recipients


def chunked(tokens: list[str], size: int) -> Iterator[list[str]]:
    if size <= 0:
        raise ValueError(f"batch size must be positive, got {size}")
    for start in range(0, len(tokens), size):
        yield tokens[start:start + size]


def _join_data(user_id: str, username: str) -> dict[str, str]:
    return {"type": QUEUE_JOIN_EVENT, "user_id": user_id, "username": username}


def background_message(user_id: str, username: str) -> PushMessage:
    """Visible notification for devices that are not in the foreground."""
    return PushMessage(
        data=_join_data(user_id, username),
        title=PUSH_ALERT_TITLE,
        body=f"{username} is looking for a match",
    )


def foreground_message(user_id: str, username: str) -> PushMessage:
    """Silent data-only push; the running app renders its own banner."""
    return PushMessage(data=_join_data(user_id, username))
