import logging
from typing import List, Mapping, Optional

from .errors import InvalidActionError, MissingConfigError
from .model import (ACTION_ABILITY, ACTION_ATTACK, ACTION_MOVEMENT, BattleAction, BattleState, Event,
                    GameData, GameRound, Roster, SoldierConfig, SoldierData)
from .presentation import NullListener, PresentationListener
from .snapshots import SnapshotStore

logger = logging.getLogger(__name__)

class ReplayEngine:
    """Deterministic round-by-round replay of a recorded battle.

    `round_index` counts processed rounds: 0 means only the initial roster
    is applied, `total_rounds` means the replay is finished. Every round
    boundary has a snapshot, so rewinding never re-simulates.
    """

    def __init__(self, game: GameData, catalog: Optional[Mapping[str, SoldierConfig]] = None,
                 listener: Optional[PresentationListener] = None, battle_id: str = "local"):
        self.rounds: List[GameRound] = list(game.rounds)
        self.catalog = catalog
        self.listener = listener if listener is not None else NullListener()
        self.snapshots = SnapshotStore()
        self.skipped: List[MissingConfigError] = []
        self.state = BattleState(round_index=0, soldiers=self._load_roster(game.soldiers),
                                 battle_id=battle_id)
        self._spawn_all()
        self.snapshots.capture(self.state.soldiers)

    @property
    def round_index(self) -> int:
        return self.state.round_index

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)

    @property
    def at_end(self) -> bool:
        return self.state.round_index >= self.total_rounds

    def _load_roster(self, soldiers: List[SoldierData]) -> Roster:
        roster: Roster = {}
        for s in soldiers:
            if self.catalog is not None and s.soldier_type not in self.catalog:
                err = MissingConfigError(s.id, s.soldier_type)
                logger.error(f"[Engine] {err}, skipping soldier")
                self.skipped.append(err)
                continue
            roster[s.id] = s.clone()
        return roster

    def _spawn_all(self) -> None:
        for s in self.state.soldiers.values():
            if s.alive:
                self._notify("on_soldier_spawned", s.id)

    def advance_one_round(self) -> List[Event]:
        """Apply the next round's actions in order. No-op once at the end."""
        if self.at_end:
            logger.info(f"[Engine] Already at final round {self.total_rounds}, nothing to advance")
            return []

        rnd = self.rounds[self.state.round_index]
        logger.info(f"[Engine] Processing round {rnd.round_number} ({len(rnd.actions)} actions)")
        evts: List[Event] = []
        for action in rnd.actions:
            try:
                evts += self._apply_action(rnd.round_number, action)
            except InvalidActionError as e:
                logger.error(f"[Engine] Skipping {action.action_type!r} action of soldier "
                             f"{action.soldier_id}: {e}")
                evts.append(Event("ActionSkipped", rnd.round_number,
                                  {"soldier_id": action.soldier_id, "action_type": action.action_type,
                                   "reason": str(e)}))

        self.state.round_index += 1
        # Replays are deterministic, so a boundary captured before a rewind stays valid.
        if self.state.round_index == len(self.snapshots):
            self.snapshots.capture(self.state.soldiers)
        self._notify("on_round_processed", rnd.round_number)
        evts.append(Event("RoundProcessed", rnd.round_number, {"round_index": self.state.round_index}))
        return evts

    def run_to_end(self) -> List[Event]:
        """Process every remaining round."""
        evts: List[Event] = []
        while not self.at_end:
            evts += self.advance_one_round()
        return evts

    def restore_round(self, index: int) -> List[Event]:
        """Replace the live roster with snapshot `index` and re-spawn everything."""
        self.state.soldiers = self.snapshots.restore(index)
        self.state.round_index = index
        self._notify("on_roster_cleared")
        self._spawn_all()
        logger.info(f"[Engine] Restored roster at round index {index}")
        return [Event("RoundRestored", index, {"round_index": index,
                                              "alive": self.state.alive_ids()})]

    def _apply_action(self, round_number: int, action: BattleAction) -> List[Event]:
        kind = action.kind
        if kind == ACTION_MOVEMENT:
            return self._move(round_number, action)
        elif kind == ACTION_ATTACK:
            return self._attack(round_number, action)
        elif kind == ACTION_ABILITY:
            return self._ability(round_number, action)
        raise InvalidActionError(f"Unknown action type: {action.action_type}")

    def _notify(self, callback: str, *args) -> None:
        """Call a listener hook. A failing hook is logged and never aborts a round."""
        try:
            getattr(self.listener, callback)(*args)
        except Exception:
            logger.exception(f"[Engine] Presentation callback {callback}{args} failed")

    def _find(self, soldier_id: Optional[int], role: str) -> SoldierData:
        """Look up a soldier by id. Recorded actors act whether or not they are still alive."""
        s = self.state.soldiers.get(soldier_id) if soldier_id is not None else None
        if s is None:
            raise InvalidActionError(f"{role} {soldier_id} not found!")
        return s

    def _living(self, soldier_id: Optional[int], role: str) -> SoldierData:
        s = self._find(soldier_id, role)
        if not s.alive:
            raise InvalidActionError(f"{role} {soldier_id} has already been defeated")
        return s

    def _move(self, round_number: int, action: BattleAction) -> List[Event]:
        """Jump to the last waypoint. Intermediate waypoints are not simulated."""
        if not action.path:
            raise InvalidActionError("Invalid movement path")
        s = self._find(action.soldier_id, "Soldier")
        s.position = tuple(action.path[-1])
        logger.debug(f"[Engine] {s.id} moved to {s.position}")
        self._notify("on_soldier_moved", s.id, s.position)
        return [Event("SoldierMoved", round_number,
                      {"soldier_id": s.id, "to": list(s.position),
                       "remaining_movement": action.remaining_movement})]

    def _attack(self, round_number: int, action: BattleAction) -> List[Event]:
        """Subtract the recorded damage. Health is not clamped; <= 0 means defeated."""
        attacker = self._find(action.soldier_id, "Attacker")
        target = self._living(action.target_id, "Target")

        target.stats.health -= action.damage_dealt
        evts = [Event("Damage", round_number,
                      {"attacker": attacker.id, "target": target.id,
                       "dmg": action.damage_dealt, "hp": target.stats.health})]
        self._notify("on_soldier_stats_changed", target.id)

        if target.defeated:
            target.alive = False
            logger.info(f"[Engine] {target.id} has been defeated!")
            self._notify("on_soldier_defeated", target.id)
            evts.append(Event("Defeated", round_number, {"soldier_id": target.id, "killer": attacker.id}))

        self._notify("on_soldier_stats_changed", attacker.id)
        self._notify("on_attack_effect", target.id)
        return evts

    def _ability(self, round_number: int, action: BattleAction) -> List[Event]:
        # Observational only: mana cost is recorded but not spent.
        caster = self._find(action.soldier_id, "Caster")
        logger.info(f"[Engine] {caster.id} cast {action.ability} at {action.target_position}")
        self._notify("on_ability_cast", caster.id, action.ability, action.target_position)
        return [Event("AbilityCast", round_number,
                      {"caster": caster.id, "ability": action.ability,
                       "target_position": list(action.target_position) if action.target_position else None,
                       "mana_cost": action.mana_cost})]
