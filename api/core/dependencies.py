"""
Shared FastAPI dependencies.

The store and notifier are created once in the app lifespan and kept on
`app.state`; tests swap them by building the app with their own instances.
"""

from __future__ import annotations

from fastapi import Request

from .notify import Notifier
from .store import Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier
