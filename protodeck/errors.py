"""Error type shared by the user-facing parts of the package."""


class UiError(Exception):
    """An error whose message is meant to be shown to the user as is."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message