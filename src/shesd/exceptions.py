class InvalidRankError(ValueError):
    """Raised when an order statistic is requested outside the bounds of a window."""

    def __init__(self, message: str):
        super().__init__(message)
