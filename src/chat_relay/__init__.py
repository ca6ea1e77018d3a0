"""Real-time chat relay: name registration, presence and broadcast."""

__version__ = "0.1.0"
