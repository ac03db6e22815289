"""Image chat: validate images, ask a vision model about them, share them to Slack."""

__version__ = "0.1.0"
