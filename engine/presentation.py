"""Callbacks from the replay core to whatever draws the battle.

The core never touches visuals. A presentation layer implements
`PresentationListener` and keeps its own id -> visual handle cache,
updated only from these calls.
"""
from typing import List, Optional, Protocol, Tuple

from .model import Position

class PresentationListener(Protocol):
    def on_roster_cleared(self) -> None: ...
    def on_soldier_spawned(self, soldier_id: int) -> None: ...
    def on_soldier_stats_changed(self, soldier_id: int) -> None: ...
    def on_soldier_defeated(self, soldier_id: int) -> None: ...
    def on_soldier_moved(self, soldier_id: int, position: Position) -> None: ...
    def on_attack_effect(self, target_id: int) -> None: ...
    def on_ability_cast(self, caster_id: int, ability: Optional[str],
                        target_position: Optional[Position]) -> None: ...
    def on_round_processed(self, round_number: int) -> None: ...

class NullListener:
    """Listener that ignores every notification."""

    def on_roster_cleared(self) -> None:
        pass

    def on_soldier_spawned(self, soldier_id: int) -> None:
        pass

    def on_soldier_stats_changed(self, soldier_id: int) -> None:
        pass

    def on_soldier_defeated(self, soldier_id: int) -> None:
        pass

    def on_soldier_moved(self, soldier_id: int, position: Position) -> None:
        pass

    def on_attack_effect(self, target_id: int) -> None:
        pass

    def on_ability_cast(self, caster_id: int, ability: Optional[str],
                        target_position: Optional[Position]) -> None:
        pass

    def on_round_processed(self, round_number: int) -> None:
        pass

class RecordingListener(NullListener):
    """Keeps every notification as a (name, *args) tuple, in call order."""

    def __init__(self):
        self.calls: List[Tuple] = []

    def on_roster_cleared(self) -> None:
        self.calls.append(("roster_cleared",))

    def on_soldier_spawned(self, soldier_id: int) -> None:
        self.calls.append(("spawned", soldier_id))

    def on_soldier_stats_changed(self, soldier_id: int) -> None:
        self.calls.append(("stats_changed", soldier_id))

    def on_soldier_defeated(self, soldier_id: int) -> None:
        self.calls.append(("defeated", soldier_id))

    def on_soldier_moved(self, soldier_id: int, position: Position) -> None:
        self.calls.append(("moved", soldier_id, position))

    def on_attack_effect(self, target_id: int) -> None:
        self.calls.append(("attack_effect", target_id))

    def on_ability_cast(self, caster_id: int, ability: Optional[str],
                        target_position: Optional[Position]) -> None:
        self.calls.append(("ability_cast", caster_id, ability, target_position))

    def on_round_processed(self, round_number: int) -> None:
        self.calls.append(("round_processed", round_number))

    def named(self, name: str) -> List[Tuple]:
        return [c for c in self.calls if c[0] == name]
