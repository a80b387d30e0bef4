"""Channel messaging -- bot handler, commands, and outbound transport."""

__all__ = [
    "Bot",
    "BotTransport",
    "CommandContext",
    "CommandDispatcher",
]
