"""
Infrastructure layer - messaging between services and connected clients.
Keeps business logic clean from delivery details.
"""

from .pubsub import PubSub, Subscription

__all__ = ['PubSub', 'Subscription']
