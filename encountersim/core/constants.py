"""
Constants and enumerations for the simulator.

Defines the enumerations shared across the simulator: teams, action slots,
resource kinds and reset rules, targeting policies, buff durations,
conditions, trigger conditions and effects, scoring modes and the
classification labels produced by the analysis layer.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class Team(NiceEnum):
    """Defines the side a combatant fights for."""

    PLAYERS = 0
    MONSTERS = 1

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this team."""
        return {
            Team.PLAYERS: "👤",
            Team.MONSTERS: "👹",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this team."""
        return {
            Team.PLAYERS: "bold blue",
            Team.MONSTERS: "bold red",
        }.get(self, "dim white")

    @property
    def opponent(self) -> "Team":
        return Team.MONSTERS if self == Team.PLAYERS else Team.PLAYERS

    def colorize(self, message: str) -> str:
        """Applies team color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class Side(NiceEnum):
    """Relative side of a target, as seen from the acting combatant."""

    ALLY = "ALLY"
    ENEMY = "ENEMY"


class Ability(NiceEnum):
    """The six abilities a saving throw can be made with."""

    STR = "STR"
    DEX = "DEX"
    CON = "CON"
    INT = "INT"
    WIS = "WIS"
    CHA = "CHA"


class ActionSlot(NiceEnum):
    """Defines the slot an action consumes when it is used."""

    ACTION = "ACTION"
    BONUS_ACTION = "BONUS_ACTION"
    REACTION = "REACTION"
    FREE = "FREE"

    @property
    def color(self) -> str:
        """Returns the color string associated with this action slot."""
        return {
            ActionSlot.ACTION: "bold yellow",
            ActionSlot.BONUS_ACTION: "bold green",
            ActionSlot.FREE: "bold cyan",
            ActionSlot.REACTION: "bold red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies action slot color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class ResourceKind(NiceEnum):
    """Kinds of consumable quantities tracked by the resource ledger."""

    ACTION = "Action"
    BONUS_ACTION = "BonusAction"
    REACTION = "Reaction"
    MOVEMENT = "Movement"
    SPELL_SLOT = "SpellSlot"
    CLASS_RESOURCE = "ClassResource"
    ITEM_CHARGE = "ItemCharge"
    HIT_DICE = "HitDice"
    CUSTOM = "Custom"


class ResetType(NiceEnum):
    """
    When a resource refills.

    The enum is ordered from the most frequent to the least frequent reset,
    and a reset of a given type also satisfies every rule that is more
    frequent than it (a long rest also counts as a short rest, and so on).
    """

    TURN = 0
    ROUND = 1
    ENCOUNTER = 2
    SHORT_REST = 3
    LONG_REST = 4
    NEVER = 5

    def is_satisfied_by(self, incoming: "ResetType") -> bool:
        """
        Checks whether a resource with this reset rule refills on the given reset.

        Args:
            incoming (ResetType): The reset currently happening.

        Returns:
            bool: True if the resource should be refilled.

        """
        if self == ResetType.NEVER or incoming == ResetType.NEVER:
            return False
        return self.value <= incoming.value


class TargetPolicy(NiceEnum):
    """Declarative targeting policies understood by the targeting resolver."""

    ENEMY_LEAST_HP = "ENEMY_LEAST_HP"
    ENEMY_MOST_HP = "ENEMY_MOST_HP"
    ENEMY_HIGHEST_DPR = "ENEMY_HIGHEST_DPR"
    ENEMY_LOWEST_AC = "ENEMY_LOWEST_AC"
    ENEMY_HIGHEST_AC = "ENEMY_HIGHEST_AC"
    ENEMY_HIGHEST_SURVIVABILITY = "ENEMY_HIGHEST_SURVIVABILITY"
    ALLY_LEAST_HP = "ALLY_LEAST_HP"
    ALLY_MOST_HP = "ALLY_MOST_HP"
    ALLY_HIGHEST_DPR = "ALLY_HIGHEST_DPR"
    ALLY_LOWEST_AC = "ALLY_LOWEST_AC"
    ALLY_HIGHEST_AC = "ALLY_HIGHEST_AC"
    ALLY_MOST_INJURED = "ALLY_MOST_INJURED"
    SELF = "SELF"

    @property
    def side(self) -> Side:
        """Returns the side of the roster this policy picks from."""
        if self.name.startswith("ENEMY"):
            return Side.ENEMY
        return Side.ALLY


class BuffDuration(NiceEnum):
    """Lifetime rules for active buffs."""

    INSTANT = "INSTANT"
    ONE_ROUND = "ONE_ROUND"
    N_ROUNDS = "N_ROUNDS"
    UNTIL_NEXT_ATTACK_MADE = "UNTIL_NEXT_ATTACK_MADE"
    UNTIL_NEXT_ATTACK_TAKEN = "UNTIL_NEXT_ATTACK_TAKEN"
    REPEAT_SAVE_EACH_ROUND = "REPEAT_SAVE_EACH_ROUND"
    ENTIRE_ENCOUNTER = "ENTIRE_ENCOUNTER"


class CreatureCondition(NiceEnum):
    """Conditions a buff can impose on the creature holding it."""

    ATTACKS_WITH_ADVANTAGE = "ATTACKS_WITH_ADVANTAGE"
    ATTACKS_WITH_DISADVANTAGE = "ATTACKS_WITH_DISADVANTAGE"
    IS_ATTACKED_WITH_ADVANTAGE = "IS_ATTACKED_WITH_ADVANTAGE"
    IS_ATTACKED_WITH_DISADVANTAGE = "IS_ATTACKED_WITH_DISADVANTAGE"
    SAVES_WITH_ADVANTAGE = "SAVES_WITH_ADVANTAGE"
    SAVES_WITH_DISADVANTAGE = "SAVES_WITH_DISADVANTAGE"
    INCAPACITATED = "INCAPACITATED"
    PARALYZED = "PARALYZED"
    STUNNED = "STUNNED"
    UNCONSCIOUS = "UNCONSCIOUS"
    INVISIBLE = "INVISIBLE"

    @property
    def is_incapacitating(self) -> bool:
        return self in (
            CreatureCondition.INCAPACITATED,
            CreatureCondition.PARALYZED,
            CreatureCondition.STUNNED,
            CreatureCondition.UNCONSCIOUS,
        )

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this condition."""
        return {
            CreatureCondition.PARALYZED: "🧊",
            CreatureCondition.STUNNED: "💫",
            CreatureCondition.UNCONSCIOUS: "💤",
            CreatureCondition.INCAPACITATED: "😵",
            CreatureCondition.INVISIBLE: "👻",
        }.get(self, "")


class ActionCondition(NiceEnum):
    """Gates deciding whether an action may be picked this turn."""

    DEFAULT = "DEFAULT"
    ALLY_BELOW_HALF_HP = "ALLY_BELOW_HALF_HP"
    ANY_ALLY_INJURED = "ANY_ALLY_INJURED"
    IS_AVAILABLE = "IS_AVAILABLE"
    IS_UNDER_HALF_HP = "IS_UNDER_HALF_HP"
    HAS_NO_TEMP_HP = "HAS_NO_TEMP_HP"
    NOT_USED_YET = "NOT_USED_YET"
    ENEMY_COUNT_ONE = "ENEMY_COUNT_ONE"
    ENEMY_COUNT_MULTIPLE = "ENEMY_COUNT_MULTIPLE"


class TriggerCondition(NiceEnum):
    """Combat conditions that make a trigger fire."""

    ON_HIT = "ON_HIT"
    ON_MISS = "ON_MISS"
    ON_CRITICAL_HIT = "ON_CRITICAL_HIT"
    ON_BEING_ATTACKED = "ON_BEING_ATTACKED"
    ON_HIT_PENDING = "ON_HIT_PENDING"
    ON_BEING_HIT = "ON_BEING_HIT"
    ON_BEING_DAMAGED = "ON_BEING_DAMAGED"
    ON_ENEMY_DEATH = "ON_ENEMY_DEATH"
    ON_ALLY_DEATH = "ON_ALLY_DEATH"
    ON_ENEMY_ACTION_STARTED = "ON_ENEMY_ACTION_STARTED"
    ON_SAVE_FAILED = "ON_SAVE_FAILED"
    ON_SAVE_SUCCEEDED = "ON_SAVE_SUCCEEDED"
    ON_TURN_START = "ON_TURN_START"


class TriggerEffectKind(NiceEnum):
    """What a trigger does once it fires."""

    DEAL_DAMAGE = "DEAL_DAMAGE"
    APPLY_BUFF = "APPLY_BUFF"
    REMOVE_BUFF = "REMOVE_BUFF"
    INTERRUPT_ACTION = "INTERRUPT_ACTION"
    RESTORE_RESOURCE = "RESTORE_RESOURCE"
    HEAL = "HEAL"


class FrequencyKind(NiceEnum):
    """How often an action may be used."""

    AT_WILL = "AT_WILL"
    ONCE_PER_FIGHT = "ONCE_PER_FIGHT"
    ONCE_PER_DAY = "ONCE_PER_DAY"
    RECHARGE = "RECHARGE"
    LIMITED = "LIMITED"


class InterestTier(NiceEnum):
    """How much detail a selected seed is replayed with."""

    FULL = "FULL"
    LEAN = "LEAN"
    NONE = "NONE"


class ScoringMode(NiceEnum):
    """Which scalar is used to rank runs."""

    STANDARD = "STANDARD"
    EFFICIENCY = "EFFICIENCY"


class TargetRole(NiceEnum):
    """Designer intent for an encounter, used to weight the daily budget."""

    SKIRMISH = "SKIRMISH"
    STANDARD = "STANDARD"
    ELITE = "ELITE"
    BOSS = "BOSS"

    @property
    def weight(self) -> int:
        """Returns the relative budget weight of the role."""
        return {
            TargetRole.SKIRMISH: 1,
            TargetRole.STANDARD: 2,
            TargetRole.ELITE: 3,
            TargetRole.BOSS: 4,
        }[self]


class EncounterArchetype(NiceEnum):
    """Qualitative shape of an encounter, derived from its vitals."""

    TRIVIAL = "TRIVIAL"
    SKIRMISH = "SKIRMISH"
    STANDARD = "STANDARD"
    THE_GRIND = "THE_GRIND"
    ELITE_CHALLENGE = "ELITE_CHALLENGE"
    BOSS_FIGHT = "BOSS_FIGHT"
    NOVA_TRAP = "NOVA_TRAP"
    MEAT_GRINDER = "MEAT_GRINDER"
    COIN_FLIP = "COIN_FLIP"
    BROKEN = "BROKEN"

    @property
    def description(self) -> str:
        """Returns a one-line description of the archetype."""
        return {
            EncounterArchetype.TRIVIAL: "No real threat to the party",
            EncounterArchetype.SKIRMISH: "Light resource drain with little danger",
            EncounterArchetype.STANDARD: "A fair fight with some risk",
            EncounterArchetype.THE_GRIND: "Slow, heavy resource drain",
            EncounterArchetype.ELITE_CHALLENGE: "Tough but fair, expect someone to drop",
            EncounterArchetype.BOSS_FIGHT: "Dangerous climax that burns the daily budget",
            EncounterArchetype.NOVA_TRAP: "Lethal burst that ends before resources matter",
            EncounterArchetype.MEAT_GRINDER: "Deaths are likely and a wipe is possible",
            EncounterArchetype.COIN_FLIP: "Outcome swings wildly between runs",
            EncounterArchetype.BROKEN: "The party is expected to be wiped out",
        }[self]

    @property
    def color(self) -> str:
        """Returns the color string associated with this archetype."""
        return {
            EncounterArchetype.TRIVIAL: "dim white",
            EncounterArchetype.SKIRMISH: "green",
            EncounterArchetype.STANDARD: "bold green",
            EncounterArchetype.THE_GRIND: "yellow",
            EncounterArchetype.ELITE_CHALLENGE: "bold yellow",
            EncounterArchetype.BOSS_FIGHT: "bold magenta",
            EncounterArchetype.NOVA_TRAP: "magenta",
            EncounterArchetype.MEAT_GRINDER: "red",
            EncounterArchetype.COIN_FLIP: "bold red",
            EncounterArchetype.BROKEN: "bold white on red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies archetype color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class EncounterLabel(NiceEnum):
    """Designer-facing label for an encounter archetype."""

    TRIVIAL_MINIONS = "TRIVIAL_MINIONS"
    ACTION_MOVIE = "ACTION_MOVIE"
    STANDARD = "STANDARD"
    THE_SLOG = "THE_SLOG"
    TACTICAL_GRINDER = "TACTICAL_GRINDER"
    EPIC_CHALLENGE = "EPIC_CHALLENGE"
    THE_TRAP = "THE_TRAP"
    TPK_RISK = "TPK_RISK"
    BROKEN = "BROKEN"


class IntensityTier(NiceEnum):
    """How much of the daily budget an encounter is meant to consume."""

    TIER1 = 1
    TIER2 = 2
    TIER3 = 3
    TIER4 = 4
    TIER5 = 5


class EncounterTier(NiceEnum):
    """Risk tier of an encounter, from harmless to expected failure."""

    TRIVIAL = 0
    SAFE = 1
    CHALLENGING = 2
    BOSS = 3
    FAILED = 4

    def shifted(self, steps: int) -> "EncounterTier":
        """
        Returns the tier moved up by the given number of steps, capped at FAILED.

        Args:
            steps (int): How many tiers to move up.

        Returns:
            EncounterTier: The shifted tier.

        """
        return EncounterTier(min(self.value + max(steps, 0), EncounterTier.FAILED.value))


# Class resources that refill on a short rest; everything else refills on a
# long rest.
SHORT_REST_RESOURCES = frozenset(
    {
        "Ki",
        "Action Surge",
        "Second Wind",
        "Channel Divinity",
        "Superiority Dice",
        "Wild Shape",
        "Bardic Inspiration",
        "Warlock Spell Slot",
    }
)

# Speed granted to every combatant, in feet.
DEFAULT_MOVEMENT = 30
