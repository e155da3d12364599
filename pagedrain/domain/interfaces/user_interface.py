"""Interface for reporting to the operator.

Defines the contract for displaying information, warnings, errors and
drain summaries, allowing different UI implementations (e.g., console).
"""

import abc
from typing import Any

from pagedrain.domain.models.batch import DrainResult


class UserInterface(abc.ABC):
    """Abstract Base Class for user-facing output."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The text to display.
            **kwargs: Additional arguments for formatting (e.g., style).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_drain_summary(self, result: DrainResult, **kwargs: Any) -> None:
        """Renders the outcome of a finished drain.

        Args:
            result: Counters returned by process_in_batches.
            **kwargs: Additional arguments, e.g. `title`.
        """
        pass
