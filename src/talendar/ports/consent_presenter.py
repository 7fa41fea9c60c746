"""OAuth consent URL presentation interface."""

from typing import Protocol


class ConsentPresenter(Protocol):
    """Shows the user the URL they must visit to grant calendar access."""

    def present(self, url: str) -> None:
        ...
