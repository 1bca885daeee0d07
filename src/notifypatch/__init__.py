"""
notifypatch - PaperMC build notification bot.

Polls the PaperMC downloads API, remembers the latest build it has seen in a
small JSON file, announces new builds to a Discord channel and answers
status queries through slash commands.

Usage:
    python -m src.notifypatch.main
"""

__version__ = "1.0.0"
