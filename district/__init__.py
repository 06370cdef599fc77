"""Game server companion: player, punishment and leaderboard databases, log relaying and server status."""

__version__ = "0.1.0"