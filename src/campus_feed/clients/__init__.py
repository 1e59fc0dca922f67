"""Clients for talking to a remote Campus Feed service."""

from .feed_client import FeedClient

__all__ = ["FeedClient"]
