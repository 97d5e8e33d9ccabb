import logging
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from src.sohl.exceptions import FrozenStateError
from src.sohl.models.schemas import Aspect, ASPECT_CHAR
from src.sohl.models.rolls import SimpleRoll, check_dice_spec

logger = logging.getLogger(__name__)

# ============================================================
# MODIFIERS
# ============================================================

class Modifier(BaseModel):
    """A single named adjustment to a value. Immutable; stacks swap entries."""
    model_config = ConfigDict(frozen=True)

    name: str                               # Display name, e.g. "Situational Modifier"
    value: int
    enabled: bool = True
    abbrev: str = ""                        # Short key, unique within a stack. Defaults to name.

    @model_validator(mode="before")
    @classmethod
    def _default_abbrev(cls, data):
        if isinstance(data, dict) and not data.get("abbrev"):
            data = {**data, "abbrev": data.get("name", "")}
        return data

    @property
    def contribution(self) -> int:
        return self.value if self.enabled else 0


class ModifierStack(BaseModel):
    """
    Ordered stack of modifiers. Reduces to a single effective value: the
    sum of the enabled entries. Disabled entries stay listed for audit.
    Once frozen (its owning roll was evaluated) the stack rejects changes.
    """
    modifiers: tuple[Modifier, ...] = ()

    _frozen: bool = PrivateAttr(default=False)

    @property
    def effective(self) -> int:
        return sum(m.contribution for m in self.modifiers)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def empty(self) -> bool:
        return not self.modifiers

    @property
    def abbrev(self) -> str:
        """Compact summary, e.g. 'SitMod +2, OffHnd -1 (disabled)'."""
        parts = []
        for m in self.modifiers:
            text = f"{m.abbrev} {m.value:+d}"
            if not m.enabled:
                text += " (disabled)"
            parts.append(text)
        return ", ".join(parts)

    def freeze(self) -> None:
        self._frozen = True

    def add(self, name: str, value: int, abbrev: str | None = None, enabled: bool = True) -> "ModifierStack":
        """
        Append a modifier. An existing entry with the same abbrev is replaced,
        and the replacement goes to the end of the stack.
        """
        self._check_mutable()
        modifier = Modifier(name=name, value=value, enabled=enabled, abbrev=abbrev or name)
        kept = tuple(m for m in self.modifiers if m.abbrev != modifier.abbrev)
        self.modifiers = kept + (modifier,)
        return self

    def get(self, abbrev: str) -> Modifier | None:
        for m in self.modifiers:
            if m.abbrev == abbrev:
                return m
        return None

    def has(self, abbrev: str) -> bool:
        return self.get(abbrev) is not None

    def remove(self, abbrev: str) -> "ModifierStack":
        self._check_mutable()
        self.modifiers = tuple(m for m in self.modifiers if m.abbrev != abbrev)
        return self

    def enable(self, abbrev: str) -> "ModifierStack":
        return self._set_enabled(abbrev, True)

    def disable(self, abbrev: str) -> "ModifierStack":
        return self._set_enabled(abbrev, False)

    def _set_enabled(self, abbrev: str, enabled: bool) -> "ModifierStack":
        self._check_mutable()
        if not self.has(abbrev):
            raise KeyError(f"No modifier with abbrev '{abbrev}'")
        # Replaced in place so display order is unchanged
        self.modifiers = tuple(
            m.model_copy(update={"enabled": enabled}) if m.abbrev == abbrev else m
            for m in self.modifiers
        )
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FrozenStateError("Modifier stack is frozen: its roll has already been evaluated")


class ImpactModifier(ModifierStack):
    """
    Modifier stack for impacts. Carries the aspect of the blow and the
    dice used for the impact roll (e.g. a longsword: 2d6, edged).
    """
    aspect: Aspect = Aspect.BLUNT
    num_dice: int = Field(default=0, ge=0)
    die: int = Field(default=6, gt=0)

    def __init__(self, **data):
        check_dice_spec(data.get("num_dice", 0), data.get("die", 6))
        super().__init__(**data)

    @property
    def disabled(self) -> bool:
        """No dice and no bonus means there is nothing to deliver."""
        return self.num_dice == 0 and self.effective == 0

    @property
    def dice_formula(self) -> str:
        if not self.num_dice and not self.effective:
            return "0"
        dice = ""
        if self.num_dice:
            dice = f"{self.num_dice if self.num_dice > 1 else ''}d{self.die}"
            dice += "+" if self.effective >= 0 else ""
        return f"{dice}{self.effective}"

    @property
    def label(self) -> str:
        return f"{self.dice_formula}{ASPECT_CHAR[self.aspect]}"

    def roll_spec(self) -> SimpleRoll:
        """Unevaluated dice for the impact. Modifiers are added separately."""
        if not self.num_dice:
            return SimpleRoll(num_dice=0, die=1)
        return SimpleRoll(num_dice=self.num_dice, die=self.die)
