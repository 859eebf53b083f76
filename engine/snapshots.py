from typing import List

from .errors import IndexOutOfRangeError
from .model import Roster, clone_roster

class SnapshotStore:
    """Append-only roster history, one entry per round boundary.

    Snapshot `i` is the roster after round `i`; snapshot 0 is the initial
    roster. Entries are clones and are cloned again on restore, so nothing
    handed out ever aliases what is stored.
    """

    def __init__(self):
        self._snapshots: List[Roster] = []

    def __len__(self) -> int:
        return len(self._snapshots)

    def capture(self, roster: Roster) -> int:
        """Store a copy of `roster` and return its index."""
        self._snapshots.append(clone_roster(roster))
        return len(self._snapshots) - 1

    def restore(self, index: int) -> Roster:
        """Return a fresh copy of snapshot `index`."""
        if not 0 <= index < len(self._snapshots):
            raise IndexOutOfRangeError(
                f"Snapshot {index} out of range [0, {len(self._snapshots)})")
        return clone_roster(self._snapshots[index])
