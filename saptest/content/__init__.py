"""
Content - Pet, food and toy definitions and the provider the engine reads them from.
"""

from .definitions import DictProvider, EntityProvider, FoodDefinition, PetDefinition, ToyDefinition
from .foods import get_all_food_definitions
from .pets import get_all_pet_definitions
from .toys import get_all_toy_definitions


def default_provider() -> DictProvider:
    """Create a provider loaded with the built-in Turtle pack content."""
    return DictProvider.from_definitions(
        get_all_pet_definitions(),
        get_all_food_definitions(),
        get_all_toy_definitions(),
    )


__all__ = [
    "DictProvider",
    "EntityProvider",
    "FoodDefinition",
    "PetDefinition",
    "ToyDefinition",
    "default_provider",
    "get_all_food_definitions",
    "get_all_pet_definitions",
    "get_all_toy_definitions",
]
