"""
Effect manager module for the simulator.

Tracks the lifecycle of every buff in an encounter: attaching and replacing
buffs, concentration, round and attack based expiry, end-of-turn repeat
saves, and the mandatory cleanup that purges every buff of a combatant
that drops to 0 HP from every other combatant in the same tick.
"""

from __future__ import annotations

from logging import debug
from typing import TYPE_CHECKING

from encountersim.core.constants import BuffDuration
from encountersim.effects.buff import ActiveBuff, Buff
from encountersim.effects.event_system import (
    BuffApplied,
    BuffExpired,
    BuffRemoved,
    ConcentrationBroken,
)

if TYPE_CHECKING:
    from encountersim.character.combatant import Combatant
    from encountersim.combat.battle_state import BattleState


class EffectManager:
    """Lifecycle manager for the buffs of one encounter."""

    def __init__(self, battle: BattleState) -> None:
        self.battle = battle

    # ==========================================================================
    # APPLYING AND REMOVING
    # ==========================================================================

    def apply_buff(
        self,
        target: Combatant,
        buff_id: str,
        buff: Buff,
        source_id: str | None,
    ) -> ActiveBuff | None:
        """
        Attaches a buff to a combatant, replacing any copy already present.

        Args:
            target (Combatant): The holder.
            buff_id (str): Id of the buff.
            buff (Buff): The buff definition.
            source_id (str | None): The caster, None for innate buffs.

        Returns:
            ActiveBuff | None: The attached buff, None for instant buffs.

        """
        if buff.duration == BuffDuration.INSTANT:
            return None
        active = ActiveBuff(
            buff_id=buff_id,
            buff=buff,
            source_id=source_id,
            remaining_rounds=buff.initial_rounds,
        )
        target.state.buffs[buff_id] = active
        self.battle.emit(BuffApplied, source_id=source_id, target_id=target.id, buff_id=buff_id)
        source = self.battle.find(source_id)
        if source is not None and source is not target:
            source.stats.buffs_applied += 1
        if buff.is_incapacitating and target.state.concentrating_on is not None:
            self.break_concentration(target, "incapacitated")
        return active

    def remove_buff(self, target: Combatant, buff_id: str, reason: str) -> bool:
        """
        Removes a buff from a combatant.

        Args:
            target (Combatant): The holder.
            buff_id (str): Id of the buff.
            reason (str): Why the buff is removed.

        Returns:
            bool: True if the buff was present.

        """
        active = target.state.buffs.pop(buff_id, None)
        if active is None:
            return False
        self.battle.emit(
            BuffRemoved,
            target_id=target.id,
            buff_id=buff_id,
            source_id=active.source_id,
            reason=reason,
        )
        self._release_concentration(active)
        return True

    def _expire(self, target: Combatant, buff_id: str) -> None:
        active = target.state.buffs.pop(buff_id, None)
        if active is None:
            return
        self.battle.emit(BuffExpired, target_id=target.id, buff_id=buff_id)
        self._release_concentration(active)

    def _release_concentration(self, removed: ActiveBuff) -> None:
        """Ends a caster's concentration once no target holds the buff anymore."""
        if not removed.buff.concentration or removed.source_id is None:
            return
        caster = self.battle.get(removed.source_id)
        if caster.state.concentrating_on != removed.buff_id:
            return
        for combatant in self.battle.combatants:
            held = combatant.state.buffs.get(removed.buff_id)
            if held is not None and held.source_id == caster.id:
                return
        caster.state.concentrating_on = None

    # ==========================================================================
    # CONCENTRATION
    # ==========================================================================

    def start_concentration(self, caster: Combatant, buff_id: str) -> None:
        """
        Makes a caster concentrate on a buff, dropping the previous one.

        Args:
            caster (Combatant): The caster.
            buff_id (str): Id of the new concentration buff.

        """
        if caster.state.concentrating_on is not None:
            self.break_concentration(caster, f"replaced by {buff_id}")
        caster.state.concentrating_on = buff_id

    def break_concentration(self, caster: Combatant, reason: str) -> None:
        """
        Ends a caster's concentration and removes the buff from every target.

        Args:
            caster (Combatant): The caster.
            reason (str): Why concentration ended.

        """
        buff_id = caster.state.concentrating_on
        if buff_id is None:
            return
        caster.state.concentrating_on = None
        self.battle.emit(ConcentrationBroken, caster_id=caster.id, buff_id=buff_id, reason=reason)
        for combatant in self.battle.combatants:
            held = combatant.state.buffs.get(buff_id)
            if held is not None and held.source_id == caster.id:
                self.remove_buff(combatant, buff_id, "concentration broken")

    # ==========================================================================
    # DEATH AND CLEANUP
    # ==========================================================================

    def on_death(self, dead: Combatant) -> None:
        """
        Purges everything a combatant that just dropped to 0 HP was sustaining.

        Args:
            dead (Combatant): The combatant at 0 HP.

        """
        self.break_concentration(dead, "dropped to 0 HP")
        self.remove_buffs_from_source(dead.id, "source died")

    def remove_buffs_from_source(self, source_id: str, reason: str) -> int:
        """
        Removes every buff whose source is the given combatant.

        Args:
            source_id (str): Id of the source.
            reason (str): Why the buffs are removed.

        Returns:
            int: Number of buffs removed.

        """
        removed = 0
        for combatant in self.battle.combatants:
            for buff_id, active in list(combatant.state.buffs.items()):
                if active.source_id == source_id:
                    self.remove_buff(combatant, buff_id, reason)
                    removed += 1
        return removed

    def cleanup_pass(self) -> int:
        """
        Re-asserts that no buff outlives its source.

        Returns:
            int: Number of buffs removed.

        """
        removed = 0
        for combatant in self.battle.combatants:
            if combatant.is_alive:
                continue
            if combatant.state.concentrating_on is not None:
                self.break_concentration(combatant, "dropped to 0 HP")
            removed += self.remove_buffs_from_source(combatant.id, "source died")
        if removed:
            debug(f"Cleanup pass removed {removed} orphaned buffs")
        return removed

    def clear_all(self, combatant: Combatant) -> None:
        """Drops every buff and the concentration of a combatant, without events."""
        combatant.state.buffs.clear()
        combatant.state.concentrating_on = None

    def apply_initial_buffs(self, combatant: Combatant) -> None:
        for buff_id, buff in combatant.creature.initial_buffs.items():
            self.apply_buff(combatant, buff_id, buff, None)

    # ==========================================================================
    # EXPIRY
    # ==========================================================================

    def end_of_round(self) -> None:
        """Decrements round-based durations and expires finished buffs."""
        for combatant in self.battle.combatants:
            for buff_id, active in list(combatant.state.buffs.items()):
                if active.remaining_rounds is None:
                    continue
                active.remaining_rounds -= 1
                if active.remaining_rounds <= 0:
                    self._expire(combatant, buff_id)

    def end_of_turn(self, combatant: Combatant) -> None:
        """Rolls the end-of-turn saves that can end a buff early."""
        for buff_id, active in list(combatant.state.buffs.items()):
            buff = active.buff
            if buff.duration != BuffDuration.REPEAT_SAVE_EACH_ROUND or buff.repeat_save_dc is None:
                continue
            if not combatant.is_alive:
                continue
            _, saved = self.battle.roll_save(
                combatant, buff.repeat_save_ability, buff.repeat_save_dc
            )
            if saved:
                self.remove_buff(combatant, buff_id, "saved")

    def after_attack(self, attacker: Combatant, target: Combatant) -> None:
        """Removes buffs that only last until the next attack made or taken."""
        for buff_id, active in list(attacker.state.buffs.items()):
            if active.buff.duration == BuffDuration.UNTIL_NEXT_ATTACK_MADE:
                self._expire(attacker, buff_id)
        for buff_id, active in list(target.state.buffs.items()):
            if active.buff.duration == BuffDuration.UNTIL_NEXT_ATTACK_TAKEN:
                self._expire(target, buff_id)
