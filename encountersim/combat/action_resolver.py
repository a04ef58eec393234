"""
Action resolver module for the simulator.

Executes one action against its resolved targets. Each variant of the
closed Action union has its own resolution path (attack, heal, buff,
debuff, template) selected by an explicit dispatch on the action type.
Every path checks the actor's ``action_interrupted`` flag before each
target, so a reaction that interrupts the action halts it immediately.
"""

import math
from collections.abc import Callable
from logging import debug

from catchery import log_warning

from encountersim.actions import (
    AttackAction,
    BaseAction,
    BuffAction,
    DebuffAction,
    HealAction,
    TemplateAction,
)
from encountersim.actions.attack_action import RiderEffect
from encountersim.character.combatant import Combatant
from encountersim.combat.battle_state import BattleState
from encountersim.combat.damage import apply_damage, apply_healing, grant_temp_hp, modify_damage
from encountersim.core.constants import Ability, CreatureCondition, TriggerCondition
from encountersim.core.dice_parser import (
    DieRoll,
    NamedModifier,
    RollBreakdown,
    evaluate_formula,
    roll_formula,
)
from encountersim.effects.buff import Buff
from encountersim.effects.event_system import AttackHit, AttackMissed, SaveResolved
from encountersim.effects.trigger_effect import after_damage, fire_triggers

# Conditions that give attackers advantage against the holder.
_HELPLESS_CONDITIONS = frozenset(
    {
        CreatureCondition.PARALYZED,
        CreatureCondition.STUNNED,
        CreatureCondition.UNCONSCIOUS,
    }
)


class ActionResolver:
    """Resolves actions inside one encounter."""

    def __init__(self, battle: BattleState) -> None:
        self.battle = battle
        self._handlers: dict[type, Callable[[Combatant, BaseAction, list[Combatant]], None]] = {
            AttackAction: self._resolve_attack,
            HealAction: self._resolve_heal,
            BuffAction: self._resolve_buff,
            DebuffAction: self._resolve_debuff,
            TemplateAction: self._resolve_template,
        }

    def resolve(self, actor: Combatant, action: BaseAction, targets: list[Combatant]) -> None:
        """
        Resolves an action.

        Enemies of the actor get a chance to react to the action starting
        (for instance to interrupt it) before any target is processed.

        Args:
            actor (Combatant): The acting combatant.
            action (BaseAction): The action, already paid for.
            targets (list[Combatant]): The resolved targets.

        """
        handler = self._handlers.get(type(action))
        if handler is None:
            log_warning(
                f"No resolution path for action type {type(action).__name__}",
                {"actor": actor.id, "action": action.id},
            )
            return
        actor.action_interrupted = False
        for enemy in self.battle.enemies_of(actor):
            if enemy.is_alive:
                fire_triggers(
                    self.battle, enemy, TriggerCondition.ON_ENEMY_ACTION_STARTED, actor, action
                )
        if actor.is_alive:
            handler(actor, action, targets)
        else:
            debug(f"{actor.name} went down before {action.name} could resolve")
        actor.action_interrupted = False

    # ==========================================================================
    # ATTACK
    # ==========================================================================

    def _resolve_attack(
        self, actor: Combatant, action: AttackAction, targets: list[Combatant]
    ) -> None:
        for target in targets:
            if actor.action_interrupted or not actor.is_alive:
                break
            if not target.is_alive:
                continue
            fire_triggers(self.battle, target, TriggerCondition.ON_BEING_ATTACKED, actor, action)
            if actor.action_interrupted or not actor.is_alive:
                break
            if action.use_saves:
                self._save_attack(actor, action, target)
            else:
                self._roll_attack(actor, action, target)
            self.battle.effects.after_attack(actor, target)

    def _roll_attack(self, actor: Combatant, action: AttackAction, target: Combatant) -> None:
        battle = self.battle
        rng = battle.rng
        attacker_conditions = actor.conditions()
        target_conditions = target.conditions()
        advantage = (
            CreatureCondition.ATTACKS_WITH_ADVANTAGE in attacker_conditions
            or CreatureCondition.IS_ATTACKED_WITH_ADVANTAGE in target_conditions
            or bool(_HELPLESS_CONDITIONS & target_conditions)
            or CreatureCondition.INVISIBLE in attacker_conditions
        )
        disadvantage = (
            CreatureCondition.ATTACKS_WITH_DISADVANTAGE in attacker_conditions
            or CreatureCondition.IS_ATTACKED_WITH_DISADVANTAGE in target_conditions
            or CreatureCondition.INVISIBLE in target_conditions
        )
        natural, dice = rng.roll_d20_with(advantage, disadvantage)
        bonus = evaluate_formula(action.to_hit, rng)
        buff_bonus = actor.buff_total("to_hit", rng)

        attack_roll = RollBreakdown(
            total=natural + bonus.total + buff_bonus,
            formula=f"1d20+{action.to_hit}",
            rolls=[DieRoll(sides=20, value=value) for value in dice] + bonus.rolls,
            modifiers=list(bonus.modifiers),
        )
        if buff_bonus:
            attack_roll.modifiers.append(NamedModifier(name="Buffs", value=buff_bonus))

        target_ac = target.ac
        is_critical = natural == 20
        is_fumble = natural == 1
        hit = not is_fumble and (is_critical or attack_roll.total >= target_ac)

        # A defensive reaction raising AC still counts against this roll.
        if hit and not is_critical:
            if fire_triggers(battle, target, TriggerCondition.ON_HIT_PENDING, actor, action):
                target_ac = target.ac
                hit = attack_roll.total >= target_ac
            if not actor.is_alive:
                return

        if not hit:
            battle.emit(
                AttackMissed,
                attacker_id=actor.id,
                target_id=target.id,
                action_id=action.id,
                attack_roll=attack_roll,
                target_ac=target_ac,
                is_fumble=is_fumble,
            )
            fire_triggers(battle, actor, TriggerCondition.ON_MISS, target, action)
            return

        multiplier = 2 if is_critical else 1
        damage_roll = evaluate_formula(action.damage, rng, multiplier)
        buff_damage = actor.buff_total("damage", rng, multiplier)
        if buff_damage:
            damage_roll.modifiers.append(NamedModifier(name="Buffs", value=buff_damage))
            damage_roll.total += buff_damage
        amount = modify_damage(battle, actor, target, damage_roll.total)
        battle.emit(
            AttackHit,
            attacker_id=actor.id,
            target_id=target.id,
            action_id=action.id,
            damage=amount,
            attack_roll=attack_roll,
            damage_roll=damage_roll,
            is_critical=is_critical,
            target_ac=target_ac,
        )
        outcome = apply_damage(battle, target, amount, actor.id)

        fire_triggers(battle, actor, TriggerCondition.ON_HIT, target, action)
        if is_critical:
            fire_triggers(battle, actor, TriggerCondition.ON_CRITICAL_HIT, target, action)
        fire_triggers(battle, target, TriggerCondition.ON_BEING_HIT, actor, action)
        after_damage(battle, target, outcome, actor, action)

        if action.rider is not None and target.is_alive:
            self._apply_rider(actor, action, target, action.rider)

    def _save_attack(self, actor: Combatant, action: AttackAction, target: Combatant) -> None:
        battle = self.battle
        dc = roll_formula(action.to_hit, battle.rng) + actor.buff_total("dc", battle.rng)
        raw = roll_formula(action.damage, battle.rng)
        self._saving_damage(
            actor, action, target, dc, action.save_ability, raw, action.half_on_save
        )

    def _apply_rider(
        self, actor: Combatant, action: AttackAction, target: Combatant, rider: RiderEffect
    ) -> None:
        dc = rider.dc + actor.buff_total("dc", self.battle.rng)
        if self._save(actor, action, target, dc, rider.ability):
            return
        if rider.buff.concentration and actor.state.concentrating_on != rider.buff_id:
            self.battle.effects.start_concentration(actor, rider.buff_id)
        self.battle.effects.apply_buff(target, rider.buff_id, rider.buff, actor.id)

    # ==========================================================================
    # HEAL
    # ==========================================================================

    def _resolve_heal(self, actor: Combatant, action: HealAction, targets: list[Combatant]) -> None:
        for target in targets:
            if actor.action_interrupted or not actor.is_alive:
                break
            if not target.is_alive:
                debug(f"{actor.name} cannot heal {target.name}: target is down")
                continue
            amount = roll_formula(action.amount, self.battle.rng)
            if action.temp_hp:
                grant_temp_hp(self.battle, target, amount, actor.id)
            else:
                apply_healing(self.battle, target, amount, actor.id)

    # ==========================================================================
    # BUFF / DEBUFF
    # ==========================================================================

    def _resolve_buff(self, actor: Combatant, action: BuffAction, targets: list[Combatant]) -> None:
        self._attach(actor, action, targets, action.id, action.buff, None)

    def _resolve_debuff(
        self, actor: Combatant, action: DebuffAction, targets: list[Combatant]
    ) -> None:
        dc = action.save_dc + actor.buff_total("dc", self.battle.rng)
        self._attach(actor, action, targets, action.id, action.buff, (dc, action.save_ability))

    def _attach(
        self,
        actor: Combatant,
        action: BaseAction,
        targets: list[Combatant],
        buff_id: str,
        buff: Buff,
        save: tuple[float, Ability] | None,
    ) -> None:
        """Attaches a buff to each target, optionally gated by a saving throw."""
        if buff.concentration:
            self.battle.effects.start_concentration(actor, buff_id)
        attached = 0
        for target in targets:
            if actor.action_interrupted or not actor.is_alive:
                break
            if not target.is_alive:
                continue
            if save is not None and self._save(actor, action, target, save[0], save[1]):
                continue
            self.battle.effects.apply_buff(target, buff_id, buff, actor.id)
            attached += 1
        if buff.concentration and attached == 0 and actor.state.concentrating_on == buff_id:
            actor.state.concentrating_on = None

    # ==========================================================================
    # TEMPLATE
    # ==========================================================================

    def _resolve_template(
        self, actor: Combatant, action: TemplateAction, targets: list[Combatant]
    ) -> None:
        battle = self.battle
        dc = action.save_dc + actor.buff_total("dc", battle.rng)
        # Damage is rolled once and applied uniformly.
        raw = roll_formula(action.damage, battle.rng) if action.damage is not None else 0.0
        buff_id = action.buff_id or action.id
        if action.buff is not None and action.buff.concentration:
            battle.effects.start_concentration(actor, buff_id)
        attached = 0
        for target in targets:
            if actor.action_interrupted or not actor.is_alive:
                break
            if not target.is_alive:
                continue
            saved = self._saving_damage(
                actor, action, target, dc, action.save_ability, raw, action.half_on_save
            )
            if not saved and action.buff is not None and target.is_alive:
                battle.effects.apply_buff(target, buff_id, action.buff, actor.id)
                attached += 1
        if (
            action.buff is not None
            and action.buff.concentration
            and attached == 0
            and actor.state.concentrating_on == buff_id
        ):
            actor.state.concentrating_on = None

    # ==========================================================================
    # SAVING THROWS
    # ==========================================================================

    def _saving_damage(
        self,
        actor: Combatant,
        action: BaseAction,
        target: Combatant,
        dc: float,
        ability: Ability,
        raw: float,
        half_on_save: bool,
    ) -> bool:
        """
        Resolves damage that a saving throw halves or negates.

        Returns:
            bool: Whether the target saved.

        """
        battle = self.battle
        roll, saved = battle.roll_save(target, ability, dc)
        if saved:
            raw = math.floor(raw / 2) if half_on_save else 0.0
        amount = modify_damage(battle, actor, target, raw) if raw > 0 else 0.0
        battle.emit(
            SaveResolved,
            source_id=actor.id,
            target_id=target.id,
            action_id=action.id,
            dc=dc,
            roll=roll,
            succeeded=saved,
            damage=amount,
        )
        if amount > 0:
            outcome = apply_damage(battle, target, amount, actor.id)
            after_damage(battle, target, outcome, actor, action)
        self._save_triggers(actor, action, target, saved)
        return saved

    def _save(
        self,
        actor: Combatant,
        action: BaseAction,
        target: Combatant,
        dc: float,
        ability: Ability,
    ) -> bool:
        """Rolls a saving throw with no damage attached and reports whether it succeeded."""
        roll, saved = self.battle.roll_save(target, ability, dc)
        self.battle.emit(
            SaveResolved,
            source_id=actor.id,
            target_id=target.id,
            action_id=action.id,
            dc=dc,
            roll=roll,
            succeeded=saved,
        )
        self._save_triggers(actor, action, target, saved)
        return saved

    def _save_triggers(
        self, actor: Combatant, action: BaseAction, target: Combatant, saved: bool
    ) -> None:
        if not target.is_alive:
            return
        condition = TriggerCondition.ON_SAVE_SUCCEEDED if saved else TriggerCondition.ON_SAVE_FAILED
        fire_triggers(self.battle, target, condition, actor, action)
