"""Minimal request/response helper."""


def send() -> str:
    """Return the reply to a ping."""
    return "pong"