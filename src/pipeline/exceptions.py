"""Pipeline exception types."""


class PipelineError(Exception):
    """Base class for card pipeline errors."""


class RequiredFieldsMissingError(PipelineError):
    """Raised when a forward move is attempted with incomplete required fields."""

    def __init__(self, card_id: str, missing_labels: list[str]):
        self.card_id = card_id
        self.missing_labels = missing_labels
        super().__init__(
            "Complete the required fields before advancing: "
            + ", ".join(missing_labels)
        )


class InvalidMoveError(PipelineError):
    """Raised when a card has no step to move to in the requested direction."""

    def __init__(self, card_id: str, reason: str):
        self.card_id = card_id
        self.reason = reason
        super().__init__(f"Cannot move card {card_id}: {reason}")


class CardLockedError(PipelineError):
    """Raised when a mutation is attempted on a frozen or read-only card."""

    def __init__(self, card_id: str, frozen: bool, read_only: bool):
        self.card_id = card_id
        self.frozen = frozen
        self.read_only = read_only
        reason = "frozen" if frozen else "read-only"
        super().__init__(f"Card {card_id} is {reason}")


class BoardFileError(PipelineError):
    """Raised when a board fixture file cannot be parsed."""
