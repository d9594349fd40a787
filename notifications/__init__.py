from .telegram import TelegramNotifier, format_proposal_message

__all__ = [
    "TelegramNotifier",
    "format_proposal_message",
]
