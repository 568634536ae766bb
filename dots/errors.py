"""
Exception hierarchy for the dots service.

The rules core is precondition based: callers check `is_move_legal` before
`apply_move`. These exceptions only fire on misuse or bad external input.
"""


class DotsError(Exception):
    """Base exception for all dots errors."""
    code = "DOTS_ERROR"

    def __init__(self, message, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
        return f"{self.message} ({details})"


class IllegalMoveError(DotsError, ValueError):
    """apply_move was called on a move that is_move_legal rejects."""
    code = "ILLEGAL_MOVE"


class InvalidHistoryError(DotsError, ValueError):
    """A move history cannot be replayed from a fresh game."""
    code = "INVALID_HISTORY"


class GameNotFoundError(DotsError, KeyError):
    code = "GAME_NOT_FOUND"

    def __str__(self):
        return DotsError.__str__(self)
