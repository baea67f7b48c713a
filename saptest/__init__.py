"""
SAPTest - Auto-battler simulation engine

A deterministic engine for simulating Super Auto Pets style battles and shop
turns. Given pet and food definitions it provides:
- Saturating stat arithmetic
- Trigger-driven effect resolution with breadth-first cascades
- A battle phase machine with a replayable event log
- A seeded shop economy (roll, freeze, buy, merge, sell)
"""

__version__ = "0.1.0"
