"""
Engine Core - Deterministic battle and shop simulation.

Components:
- Statistics: saturating attack/health pair
- Action / Effect: what pets do and when they do it
- EventEngine: breadth-first trigger queue
- Roster: one side's pet slots
- Toy: team-attached items acting through the front pet
- Battle: turn/phase orchestration
- Shop: between-battle economy
"""

from .action import Action, ActionKind
from .battle import Battle, BattleOutcome, BattlePhase, BattleResult, fight
from .effect import (
    Condition,
    Effect,
    EventKind,
    OwnerKind,
    Position,
    Side,
    Target,
    TargetSelector,
    TriggerScope,
)
from .engine import EngineState, EventEngine
from .event import ActionRecord, Event, EventLog, LogEntry
from .pet import Food, Pet
from .roster import Roster
from .shop import ItemKind, Shop, ShopItem, ShopState
from .stats import Statistics
from .toy import Toy

__all__ = [
    "Action",
    "ActionKind",
    "ActionRecord",
    "Battle",
    "BattleOutcome",
    "BattlePhase",
    "BattleResult",
    "Condition",
    "Effect",
    "EngineState",
    "Event",
    "EventEngine",
    "EventKind",
    "EventLog",
    "Food",
    "ItemKind",
    "LogEntry",
    "OwnerKind",
    "Pet",
    "Position",
    "Roster",
    "Shop",
    "ShopItem",
    "ShopState",
    "Side",
    "Statistics",
    "Target",
    "TargetSelector",
    "Toy",
    "TriggerScope",
    "fight",
]
