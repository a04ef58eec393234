"""
Combat manager module for the simulator.

Runs one encounter from initiative to its end: encounter setup of both
rosters, pre-cast buffs, the round loop with per-turn resource resets,
recharge rolls, turn-start triggers and action selection, end-of-round
expiry and cleanup, and the round snapshots kept in the result.
"""

from logging import debug

from encountersim.actions import BaseAction, BuffAction
from encountersim.character.combatant import ActionRecord, Combatant, EncounterStats
from encountersim.combat.action_resolver import ActionResolver
from encountersim.combat.battle_state import BattleState
from encountersim.combat.npc_ai import choose_action
from encountersim.combat.targeting import resolve_targets
from encountersim.core.config import SimulationConfig
from encountersim.core.constants import (
    ActionSlot,
    FrequencyKind,
    ResetType,
    Team,
    TriggerCondition,
)
from encountersim.core.dice_parser import roll_formula
from encountersim.core.rng import DiceRng
from encountersim.effects.event_log import EventLog
from encountersim.effects.event_system import (
    ActionSkipped,
    ActionStarted,
    EncounterEnded,
    EncounterStarted,
    ResourceConsumed,
    ResourceRestored,
    RoundEnded,
    RoundStarted,
    TurnEnded,
    TurnStarted,
)
from encountersim.effects.trigger_effect import fire_triggers
from encountersim.simulation.results import EncounterResult, Round
from encountersim.simulation.timeline import Encounter

# Slots filled on every turn, in order.
TURN_SLOTS = (ActionSlot.ACTION, ActionSlot.BONUS_ACTION, ActionSlot.FREE)


class CombatManager:
    """
    Runs a single encounter between a party and a monster roster.

    The party is carried across encounters by the caller: hit points,
    temporary hit points, ward and ledger are never rebuilt here, the
    ledger only gets its encounter reset.
    """

    def __init__(
        self,
        players: list[Combatant],
        monsters: list[Combatant],
        encounter: Encounter,
        rng: DiceRng,
        log: EventLog,
        config: SimulationConfig,
        encounter_index: int = 0,
        capture_rounds: bool = True,
    ) -> None:
        self.encounter = encounter
        self.capture_rounds = capture_rounds
        self.battle = BattleState(players, monsters, rng, log, config, encounter_index)
        self.resolver = ActionResolver(self.battle)
        self.order: list[Combatant] = []
        self.rounds: list[Round] = []
        self.reason = ""

    # ==========================================================================
    # SETUP
    # ==========================================================================

    def _prepare(self) -> None:
        """Resets every combatant for a new encounter and takes the initial snapshots."""
        for combatant in self.battle.combatants:
            combatant.state.ledger.reset(ResetType.ENCOUNTER)
            combatant.state.trigger_uses.clear()
            combatant.stats = EncounterStats()
            combatant.actions_taken = []
            combatant.action_interrupted = False
            self.battle.effects.clear_all(combatant)
        for combatant in self.battle.combatants:
            if combatant.is_alive:
                self.battle.effects.apply_initial_buffs(combatant)
        for combatant in self.battle.combatants:
            combatant.initial_state = combatant.state.snapshot()

    def _roll_initiative(self) -> None:
        """Rolls initiative and sorts the turn order, ties kept in roster order."""
        rng = self.battle.rng
        for combatant in self.battle.combatants:
            roll, _ = rng.roll_d20_with(combatant.creature.initiative_advantage, False)
            combatant.initiative = roll + roll_formula(combatant.creature.initiative_bonus, rng)
        self.order = sorted(self.battle.combatants, key=lambda c: -c.initiative)
        debug("Turn order: " + ", ".join(f"{c.name} ({c.initiative:g})" for c in self.order))

    def _precast(self, team: Team) -> None:
        """Lets every member of a side cast its buffs before round 1."""
        for actor in self.battle.alive(team):
            for action in actor.creature.actions:
                if not isinstance(action, BuffAction):
                    continue
                slot = action.slot_key()
                costs = [(key, amount) for key, amount in action.all_costs() if key != slot]
                if not all(actor.state.ledger.has(key, amount) for key, amount in costs):
                    continue
                targets = resolve_targets(
                    actor, action, self.battle.allies_of(actor), self.battle.enemies_of(actor)
                )
                if not targets:
                    continue
                self._pay(actor, costs)
                self._take(actor, action, targets, ["precast"])

    # ==========================================================================
    # TURNS
    # ==========================================================================

    def _pay(self, actor: Combatant, costs: list[tuple[str, float]]) -> None:
        for key, amount in costs:
            actor.state.ledger.consume(key, amount)
            self.battle.emit(ResourceConsumed, unit_id=actor.id, resource=key, amount=amount)

    def _take(
        self,
        actor: Combatant,
        action: BaseAction,
        targets: list[Combatant],
        trace: list[str],
    ) -> None:
        target_ids = [target.id for target in targets]
        self.battle.emit(
            ActionStarted,
            actor_id=actor.id,
            action_id=action.id,
            action_name=action.name,
            target_ids=target_ids,
            decision_trace=trace,
        )
        actor.actions_taken.append(
            ActionRecord(
                round=self.battle.round,
                action_id=action.id,
                action_name=action.name,
                target_ids=target_ids,
            )
        )
        actor.stats.actions_used += 1
        self.resolver.resolve(actor, action, targets)

    def _roll_recharges(self, actor: Combatant) -> None:
        """Rolls a d6 for every spent recharge action of a combatant."""
        ledger = actor.state.ledger
        for action in actor.creature.actions:
            if action.frequency.kind != FrequencyKind.RECHARGE:
                continue
            if ledger.has(action.usage_key):
                continue
            if self.battle.rng.roll(6) >= action.frequency.recharge_min:
                restored = ledger.restore(action.usage_key)
                self.battle.emit(
                    ResourceRestored,
                    unit_id=actor.id,
                    resource=action.usage_key,
                    amount=restored,
                )

    def _is_surprised(self, actor: Combatant) -> bool:
        if self.battle.round != 1:
            return False
        if actor.team == Team.PLAYERS:
            return self.encounter.players_surprised
        return self.encounter.monsters_surprised

    def run_turn(self, actor: Combatant) -> None:
        """
        Runs the turn of one combatant.

        Args:
            actor (Combatant): The combatant whose turn it is.

        """
        battle = self.battle
        actor.state.ledger.reset(ResetType.TURN)
        self._roll_recharges(actor)
        battle.emit(TurnStarted, unit_id=actor.id)
        fire_triggers(battle, actor, TriggerCondition.ON_TURN_START)

        if not actor.is_alive:
            battle.emit(ActionSkipped, actor_id=actor.id, reason="dropped at turn start")
        elif actor.is_incapacitated:
            battle.emit(ActionSkipped, actor_id=actor.id, reason="incapacitated")
        elif self._is_surprised(actor):
            battle.emit(ActionSkipped, actor_id=actor.id, reason="surprised")
        else:
            for slot in TURN_SLOTS:
                if not actor.is_alive or self._side_wiped():
                    break
                selection = choose_action(battle, actor, slot)
                if selection is None:
                    continue
                self._pay(actor, selection.action.all_costs())
                self._take(actor, selection.action, selection.targets, selection.trace)

        battle.effects.end_of_turn(actor)
        battle.emit(TurnEnded, unit_id=actor.id)

    # ==========================================================================
    # ROUNDS
    # ==========================================================================

    def _side_wiped(self) -> bool:
        return not self.battle.alive(Team.PLAYERS) or not self.battle.alive(Team.MONSTERS)

    def _snapshot_round(self) -> Round:
        return Round(
            round=self.battle.round,
            team1=[combatant.snapshot() for combatant in self.battle.players],
            team2=[combatant.snapshot() for combatant in self.battle.monsters],
        )

    def run_round(self) -> bool:
        """
        Runs one full round.

        Returns:
            bool: False once the turn budget is exhausted.

        """
        battle = self.battle
        battle.round += 1
        for combatant in battle.combatants:
            combatant.state.ledger.reset(ResetType.ROUND)
        battle.emit(RoundStarted)

        within_budget = True
        for actor in self.order:
            if self._side_wiped():
                break
            if not actor.is_alive:
                continue
            if battle.turns >= battle.config.max_turns:
                within_budget = False
                break
            battle.turns += 1
            self.run_turn(actor)

        battle.effects.end_of_round()
        battle.effects.cleanup_pass()
        battle.emit(RoundEnded)
        if self.capture_rounds:
            self.rounds.append(self._snapshot_round())
        return within_budget

    def _winner(self) -> Team | None:
        players_alive = bool(self.battle.alive(Team.PLAYERS))
        monsters_alive = bool(self.battle.alive(Team.MONSTERS))
        if players_alive and not monsters_alive:
            return Team.PLAYERS
        if monsters_alive and not players_alive:
            return Team.MONSTERS
        return None

    def run(self) -> EncounterResult:
        """
        Fights the encounter to its end.

        Returns:
            EncounterResult: Snapshots, statistics and winner of the encounter.

        """
        battle = self.battle
        self._prepare()
        self._roll_initiative()
        battle.emit(
            EncounterStarted,
            encounter_index=battle.encounter_index,
            combatant_ids=[combatant.id for combatant in self.order],
        )
        if self.encounter.players_precast:
            self._precast(Team.PLAYERS)
        if self.encounter.monsters_precast:
            self._precast(Team.MONSTERS)

        while True:
            if self._side_wiped():
                self.reason = "side defeated"
                break
            if battle.round >= battle.config.max_rounds:
                self.reason = "round limit"
                break
            if not self.run_round():
                self.reason = "turn limit"
                break

        if not self.rounds:
            self.rounds.append(self._snapshot_round())
        for combatant in battle.combatants:
            combatant.final_state = combatant.state.snapshot()

        winner = self._winner()
        battle.emit(
            EncounterEnded,
            encounter_index=battle.encounter_index,
            winner=winner.value if winner is not None else None,
            reason=self.reason,
            rounds=battle.round,
        )
        debug(
            f"Encounter {battle.encounter_index} ended after {battle.round} rounds: {self.reason}"
        )
        return EncounterResult(
            encounter_index=battle.encounter_index,
            winner=winner,
            reason=self.reason,
            rounds_fought=battle.round,
            target_role=self.encounter.target_role,
            initial=[
                combatant.snapshot().model_copy(update={"state": combatant.initial_state})
                for combatant in battle.combatants
            ],
            rounds=self.rounds,
            stats={combatant.id: combatant.stats for combatant in battle.combatants},
            actions={combatant.id: combatant.actions_taken for combatant in battle.combatants},
        )


def run_encounter(
    players: list[Combatant],
    monsters: list[Combatant],
    encounter: Encounter,
    rng: DiceRng,
    log: EventLog,
    config: SimulationConfig,
    encounter_index: int = 0,
    capture_rounds: bool = True,
) -> EncounterResult:
    """Runs an encounter through a fresh CombatManager."""
    return CombatManager(
        players, monsters, encounter, rng, log, config, encounter_index, capture_rounds
    ).run()
