from collections import defaultdict
from typing import DefaultDict, List, Optional, Tuple
from engine.model import Event

class EventLog:
    """Playback history: every event in arrival order, also indexed by round.

    Rewinding does not remove anything; a round replayed after a rewind
    simply appears again later in the log.
    """

    def __init__(self):
        self._log: List[Event] = []
        self._by_round: DefaultDict[int, List[int]] = defaultdict(list)

    def __len__(self) -> int:
        return len(self._log)

    def append_many(self, evts: List[Event]) -> Tuple[int, int]:
        """Append events and return (start_offset, end_offset)."""
        start = len(self._log)
        for offset, e in enumerate(evts, start):
            self._log.append(e)
            self._by_round[e.round].append(offset)
        return start, len(self._log) - 1

    def since(self, offset: int, limit: int = 1000,
              round: Optional[int] = None) -> Tuple[List[Event], int]:
        """Page through events from `offset`, optionally only those of one round.

        The returned offset is where the next page starts.
        """
        offset = max(0, offset)
        if round is None:
            chunk = self._log[offset: offset + limit]
            return chunk, offset + len(chunk)
        offsets = [o for o in self._by_round.get(round, []) if o >= offset][:limit]
        next_offset = offsets[-1] + 1 if offsets else max(offset, len(self._log))
        return [self._log[o] for o in offsets], next_offset

    def rounds(self) -> List[int]:
        """Round numbers that have produced events, ascending."""
        return sorted(self._by_round)

    def of_kind(self, kind: str) -> List[Event]:
        return [e for e in self._log if e.kind == kind]
