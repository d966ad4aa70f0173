"""
Remote Layer

httpx client for the futures wheel API and the background poller
that feeds refreshes into a session.
"""

from .client import DiagramClient, SaveResult
from .poller import DiagramPoller, save_session

__all__ = [
    'DiagramClient',
    'SaveResult',
    'DiagramPoller',
    'save_session',
]
