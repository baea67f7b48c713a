"""
Content Validation - Checks pet, food and toy definitions before play.

Validates that:
1. Required fields are present and tiers/stats are in range
2. Summon and gain actions reference entities the provider knows
3. Effects are well-formed (selector fields match the position used)
4. Names are unique across pets, foods and toys
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.action import Action, ActionKind
from ..engine_core.effect import Effect, EventKind, OwnerKind, Position, Target
from .definitions import DictProvider, FoodDefinition, PetDefinition, ToyDefinition


class ContentValidationError(Exception):
    """Raised when content validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Content validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_content(
    provider: DictProvider,
    max_level: int = 3,
    max_tier: int = 6,
    raise_on_error: bool = False,
) -> ValidationResult:
    """
    Validate every definition held by a provider.

    Returns ValidationResult with errors and warnings.
    Raises ContentValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    pet_names = set(provider.pets)
    food_names = set(provider.foods)

    for name in sorted(pet_names & food_names):
        errors.append(f"Name '{name}' used by both a pet and a food")
    for name in sorted(set(provider.toys) & (pet_names | food_names)):
        errors.append(f"Name '{name}' used by both a toy and a pet or food")

    for name, pet in sorted(provider.pets.items()):
        if name != pet.name:
            errors.append(f"Pet registered as '{name}' is named '{pet.name}'")
        errors.extend(_validate_pet(pet, pet_names, food_names, max_level, max_tier))

    for name, food in sorted(provider.foods.items()):
        if name != food.name:
            errors.append(f"Food registered as '{name}' is named '{food.name}'")
        errors.extend(_validate_food(food, pet_names, food_names, max_tier))

    for name, toy in sorted(provider.toys.items()):
        if name != toy.name:
            errors.append(f"Toy registered as '{name}' is named '{toy.name}'")
        errors.extend(_validate_toy(toy, pet_names, food_names, max_level, max_tier))

    # Warnings for incomplete content
    for tier in range(1, max_tier + 1):
        if not provider.pets_at_tier(tier):
            warnings.append(f"No shop pets at tier {tier}")
    if not provider.foods_for_tier(1):
        warnings.append("No tier 1 foods - shop food slots will stay empty")

    if errors and raise_on_error:
        raise ContentValidationError(errors)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_pet(
    pet: PetDefinition,
    pet_names: set[str],
    food_names: set[str],
    max_level: int,
    max_tier: int,
) -> list[str]:
    """Validate a single pet definition."""
    errors = []
    if not pet.name:
        errors.append("Pet has empty name")
    if not 1 <= pet.tier <= max_tier:
        errors.append(f"Pet '{pet.name}' has tier {pet.tier} outside 1-{max_tier}")
    if pet.attack < 0 or pet.health < 1:
        errors.append(f"Pet '{pet.name}' has invalid base stats {pet.base_stats}")
    if pet.cost < 0:
        errors.append(f"Pet '{pet.name}' has negative cost")

    for level in range(1, max_level + 1):
        for effect in pet.effects_for(level):
            effect_errors = _validate_effect(effect, pet_names, food_names)
            errors.extend([f"Pet '{pet.name}' level {level}: {e}" for e in effect_errors])

    return errors


def _validate_food(
    food: FoodDefinition,
    pet_names: set[str],
    food_names: set[str],
    max_tier: int,
) -> list[str]:
    """Validate a single food definition."""
    errors = []
    if not food.name:
        errors.append("Food has empty name")
    if not 1 <= food.tier <= max_tier:
        errors.append(f"Food '{food.name}' has tier {food.tier} outside 1-{max_tier}")
    if food.effect is None:
        errors.append(f"Food '{food.name}' has no effect")
    else:
        effect_errors = _validate_effect(food.effect, pet_names, food_names)
        errors.extend([f"Food '{food.name}': {e}" for e in effect_errors])
    return errors


def _validate_toy(
    toy: ToyDefinition,
    pet_names: set[str],
    food_names: set[str],
    max_level: int,
    max_tier: int,
) -> list[str]:
    errors = []
    if not toy.name:
        errors.append("Toy has empty name")
    if not 1 <= toy.tier <= max_tier:
        errors.append(f"Toy '{toy.name}' has tier {toy.tier} outside 1-{max_tier}")
    if toy.duration is not None and toy.duration < 1:
        errors.append(f"Toy '{toy.name}' has duration {toy.duration}")

    for level in range(1, max_level + 1):
        effects = toy.effects_for(level)
        if not effects:
            errors.append(f"Toy '{toy.name}' level {level} has no effects")
        for effect in effects:
            if effect.owner_kind != OwnerKind.TOY:
                errors.append(f"Toy '{toy.name}' level {level}: effect not owned by a toy")
            if effect.trigger == EventKind.TOY_BREAK and toy.duration is None:
                errors.append(f"Toy '{toy.name}' has a break effect but never breaks")
            effect_errors = _validate_effect(effect, pet_names, food_names)
            errors.extend([f"Toy '{toy.name}' level {level}: {e}" for e in effect_errors])
    return errors


def _validate_effect(effect: Effect, pet_names: set[str], food_names: set[str]) -> list[str]:
    """Validate effect structure and references."""
    errors = []
    selector = effect.target

    if selector.n < 1:
        errors.append(f"Effect '{effect.describe()}' selects {selector.n} targets")
    if selector.position == Position.EXACT and selector.index is None:
        errors.append(f"Effect '{effect.describe()}' uses EXACT position without an index")
    if selector.position == Position.BY_CONDITION and selector.condition is None:
        errors.append(f"Effect '{effect.describe()}' uses BY_CONDITION without a condition")
    if effect.uses is not None and effect.uses < 0:
        errors.append(f"Effect '{effect.describe()}' has negative uses")

    shop_kinds = {ActionKind.ALTER_GOLD, ActionKind.ADD_SHOP_STATS, ActionKind.FREE_ROLL}
    for action in _flatten(effect.action):
        if action.kind in shop_kinds and selector.target != Target.SHOP:
            errors.append(f"Shop action '{action.kind.value}' must target the shop")
        errors.extend(_validate_action(action, pet_names, food_names))

    return errors


def _validate_action(action: Action, pet_names: set[str], food_names: set[str]) -> list[str]:
    errors = []
    if action.kind == ActionKind.SUMMON and action.name is not None and action.name not in pet_names:
        errors.append(f"Summon references unknown pet '{action.name}'")
    if action.kind == ActionKind.GAIN and action.name not in food_names:
        errors.append(f"Gain references unknown food '{action.name}'")
    if action.kind in (ActionKind.ADD, ActionKind.REMOVE, ActionKind.SET, ActionKind.DEBUFF) and action.stats is None:
        errors.append(f"Action '{action.kind.value}' has no stats")
    return errors


def _flatten(action: Action) -> list[Action]:
    if action.kind == ActionKind.MULTIPLE:
        flat = []
        for inner in action.actions:
            flat.extend(_flatten(inner))
        return flat
    return [action]
