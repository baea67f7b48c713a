"""
Pytest fixtures for SAPTest tests.
"""

import pytest

from ..config import EngineConfig, ShopConfig
from ..content import DictProvider, default_provider
from ..engine_core.pet import Food, Pet
from ..engine_core.roster import Roster
from ..engine_core.shop import ItemKind, Shop, ShopItem


@pytest.fixture
def provider() -> DictProvider:
    """Built-in Turtle pack content."""
    return default_provider()


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def make_pet(provider):
    """Factory: make_pet("Ant", level=2, item="Garlic")."""
    def _make(name, level=1, attack=None, health=None, item=None):
        pet = Pet.from_definition(
            provider.lookup_pet(name, level),
            level=level,
            attack=attack,
            health=health,
        )
        if item:
            pet.give_item(Food.from_definition(provider.lookup_food(item)))
        return pet
    return _make


@pytest.fixture
def make_roster(make_pet):
    """Factory: make_roster("Ant", None, "Fish", seed=1)."""
    def _make(*names, seed=0, name="team", config=None):
        pets = [make_pet(n) if n else None for n in names]
        return Roster(pets, seed=seed, name=name, config=config)
    return _make


@pytest.fixture
def shop(provider) -> Shop:
    """A closed tier 1 shop with a fixed seed."""
    return Shop(tier=1, seed=3, provider=provider, config=ShopConfig())


@pytest.fixture
def stock(provider):
    """Factory: put a known pet or food into a shop slot."""
    def _stock(shop, slot, name):
        if name in provider.pets:
            definition = provider.lookup_pet(name)
            item = ShopItem(
                name, definition.cost, ItemKind.PET, definition.tier,
                pet=Pet.from_definition(definition),
            )
        else:
            definition = provider.lookup_food(name)
            item = ShopItem(
                name, definition.cost, ItemKind.FOOD, definition.tier,
                food=Food.from_definition(definition),
            )
        shop.items[slot] = item
        return item
    return _stock
