"""
Shared route dependencies.
"""

from fastapi import Request

from campus_events.infrastructure.pubsub import PubSub


def get_pubsub(request: Request) -> PubSub:
    """The broker created at startup."""
    return request.app.state.pubsub
