"""Rock-Paper-Scissors card duels with super cards, vs a bot or over a room relay."""

__version__ = "0.1.0"
