"""hashbridge: forward hashtagged Telegram messages to record-keeping destinations."""

__version__ = "0.1.0"
