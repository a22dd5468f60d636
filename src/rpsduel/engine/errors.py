from __future__ import annotations


class EngineError(RuntimeError):
    pass


class InvalidComposition(EngineError):
    """The deck composition adds up to zero cards."""


class IllegalMove(EngineError):
    """A play that the current state cannot accept. Never leaves `step`."""
