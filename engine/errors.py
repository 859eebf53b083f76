class ReplayError(Exception):
    """Base class for all battle replay errors."""


class MalformedDataError(ReplayError):
    """Document could not be parsed or has the wrong shape. Aborts the load."""


class MapLoadError(MalformedDataError):
    """Map document could not be read or parsed."""


class MissingConfigError(ReplayError):
    """Soldier references a type that has no config entry. Soldier is skipped."""

    def __init__(self, soldier_id: int, soldier_type: str):
        super().__init__(f"Config for {soldier_type!r} not found (soldier {soldier_id})")
        self.soldier_id = soldier_id
        self.soldier_type = soldier_type


class InvalidActionError(ReplayError):
    """Action cannot be applied. It is skipped and the round continues."""


class IndexOutOfRangeError(ReplayError, IndexError):
    """Snapshot index outside the captured range."""
