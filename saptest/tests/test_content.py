"""
Tests for content definitions, the provider and content validation.
"""

import pytest

from ..content import DictProvider, FoodDefinition, PetDefinition
from ..content.validation import ContentValidationError, validate_content
from ..engine_core.action import Action
from ..engine_core.effect import Effect, EventKind, Position, Target, TargetSelector
from ..errors import UnknownEntity


class TestBuiltinContent:
    """The bundled Turtle pack."""

    def test_validates_cleanly(self, provider):
        result = validate_content(provider)
        assert result.valid, result.errors
        assert result.warnings == []

    def test_every_tier_has_shop_pets(self, provider):
        for tier in range(1, 7):
            assert provider.pets_at_tier(tier), f"tier {tier}"

    def test_tokens_not_sold(self, provider):
        names = {p.name for p in provider.pets_for_tier(6)}
        assert "Zombie Cricket" not in names
        assert "Dirty Rat" not in names
        assert "Coconut" not in {f.name for f in provider.foods_for_tier(6)}
        # Tokens can still be looked up for summons
        assert provider.lookup_pet("Zombie Cricket").token

    def test_tier_pools_are_cumulative(self, provider):
        tier_one = {p.name for p in provider.pets_for_tier(1)}
        tier_two = {p.name for p in provider.pets_for_tier(2)}
        assert tier_one < tier_two
        assert all(p.tier == 1 for p in provider.pets_for_tier(1))

    def test_effects_are_fresh_per_call(self, provider):
        ant = provider.lookup_pet("Ant")
        first, second = ant.effects_for(1), ant.effects_for(1)
        first[0].consume()
        assert first[0] is not second[0]
        assert not second[0].is_spent

    def test_effects_scale_with_level(self, provider):
        ant = provider.lookup_pet("Ant")
        assert ant.effects_for(1)[0].action.stats == (2, 1)
        assert ant.effects_for(3)[0].action.stats == (6, 3)


class TestLookup:
    """Provider lookups."""

    def test_unknown_pet(self, provider):
        with pytest.raises(UnknownEntity) as exc:
            provider.lookup_pet("Dragon")
        assert exc.value.name == "Dragon"
        assert exc.value.code == "UNKNOWN_ENTITY"

    def test_level_out_of_range(self, provider):
        with pytest.raises(UnknownEntity):
            provider.lookup_pet("Ant", level=4)

    def test_unknown_food(self, provider):
        with pytest.raises(UnknownEntity):
            provider.lookup_food("Cake")

    def test_pack_filter(self):
        provider = DictProvider.from_definitions([
            PetDefinition("Ant", 1, 2, 1),
            PetDefinition("Puppy", 1, 2, 2, pack="Puppy"),
        ])
        assert [p.name for p in provider.pets_for_tier(1, "Puppy")] == ["Puppy"]
        assert len(provider.pets_for_tier(1)) == 2


class TestValidation:
    """Validation of custom content."""

    def test_bad_stats_and_tier(self):
        provider = DictProvider.from_definitions([PetDefinition("Blob", 9, -1, 0)])
        result = validate_content(provider)
        assert not result.valid
        assert any("tier 9" in e for e in result.errors)
        assert any("invalid base stats" in e for e in result.errors)

    def test_summon_of_unknown_pet(self):
        bad = PetDefinition(
            "Caller", 1, 1, 1,
            effects=lambda n: [Effect(
                trigger=EventKind.FAINT,
                action=Action.summon("Ghost"),
                target=TargetSelector(Target.FRIEND, Position.ON_SELF),
            )],
        )
        result = validate_content(DictProvider.from_definitions([bad]))
        assert any("unknown pet 'Ghost'" in e for e in result.errors)

    def test_shop_action_must_target_shop(self):
        bad = PetDefinition(
            "Banker", 1, 1, 1,
            effects=lambda n: [Effect(
                trigger=EventKind.SELL,
                action=Action.alter_gold(1),
                target=TargetSelector(Target.FRIEND, Position.ON_SELF),
            )],
        )
        result = validate_content(DictProvider.from_definitions([bad]))
        assert any("must target the shop" in e for e in result.errors)

    def test_exact_needs_index(self):
        bad = PetDefinition(
            "Sniper", 1, 1, 1,
            effects=lambda n: [Effect(
                trigger=EventKind.START_OF_BATTLE,
                action=Action.damage(1),
                target=TargetSelector(Target.ENEMY, Position.EXACT),
            )],
        )
        result = validate_content(DictProvider.from_definitions([bad]))
        assert any("without an index" in e for e in result.errors)

    def test_food_without_effect(self):
        provider = DictProvider.from_definitions([], [FoodDefinition("Air", 1)])
        result = validate_content(provider)
        assert any("has no effect" in e for e in result.errors)

    def test_name_clash(self):
        provider = DictProvider.from_definitions(
            [PetDefinition("Apple", 1, 1, 1)],
            [FoodDefinition("Apple", 1, effect=Effect(
                trigger=EventKind.BUY_FOOD,
                action=Action.add(1, 1),
                target=TargetSelector(Target.FRIEND, Position.ON_SELF),
            ))],
        )
        result = validate_content(provider)
        assert any("both a pet and a food" in e for e in result.errors)

    def test_warnings_for_missing_tiers(self):
        provider = DictProvider.from_definitions([PetDefinition("Ant", 1, 2, 1)])
        result = validate_content(provider)
        assert result.valid
        assert "No shop pets at tier 2" in result.warnings

    def test_raise_on_error(self):
        provider = DictProvider.from_definitions([PetDefinition("", 1, 1, 1)])
        with pytest.raises(ContentValidationError) as exc:
            validate_content(provider, raise_on_error=True)
        assert "Pet has empty name" in exc.value.errors
