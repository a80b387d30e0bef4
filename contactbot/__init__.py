"""Contact-list conversion bot with rate-limited grouped file delivery."""

__version__ = "1.0.0"
