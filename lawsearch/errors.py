from __future__ import annotations

"""Exceptions raised inside the recommender package."""


class LawSearchError(Exception):
    """Base class for errors raised by this package."""


class RecommenderUnavailable(LawSearchError):
    """The external recommender could not produce an answer.

    Covers a missing API key, timeouts, transport errors, non-2xx
    responses and the case where no usable model can be resolved.
    Callers recover by falling back to local results only.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
