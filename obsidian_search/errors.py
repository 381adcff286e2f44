"""Exception types raised by the search core."""


class BudgetExceededError(RuntimeError):
    """Raised when a fragment is consumed without fitting in the response budget."""

    def __init__(self, attempted: int, available: int) -> None:
        self.attempted = attempted
        self.available = available
        super().__init__(
            f"Cannot consume budget: fragment needs {attempted} characters "
            f"but only {available} remain"
        )


class InvalidTokenConfigError(ValueError):
    """Raised when a response budget configuration is inconsistent."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid token configuration: {message}")
