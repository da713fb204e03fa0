"""Render CI/CD run outcomes into chat webhook notification cards."""

__all__ = [
    "config",
    "models",
    "markdown",
    "layouts",
    "serializer",
    "github",
    "notifier",
    "dispatcher",
]
