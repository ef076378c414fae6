"""Adapters connecting the core ports to Reddit, Telegram and remote logging."""
