"""Outbound notification channels.

``get_email_channel()`` returns the process-wide email adapter. The in-memory
adapter is used until another one is installed with ``set_email_channel()``.
"""

from tianguis.notifications.email_port import EmailPort
from tianguis.notifications.fake_email import FakeEmailAdapter

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    global _email_channel
    if _email_channel is None:
        _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_channels() -> None:
    global _email_channel
    _email_channel = None
