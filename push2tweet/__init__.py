"""push2tweet: relays button-press events to Twitter."""

__version__ = "0.1.0"
