"""Offline capture queue for replaying captures when the classifier is unavailable."""

from justdo.delivery.offline_queue import OfflineCaptureQueue, QueueCounts, QueuedCapture

__all__ = ["OfflineCaptureQueue", "QueueCounts", "QueuedCapture"]
