"""
ColorWars - Chain-Reaction Territory Game Engine

A deterministic board simulation core for a turn-based chain-reaction game,
shared by every way the game is hosted:
- Board model and capacity rules
- Explosion engine (chain reactions)
- Turn rules and win detection
- Bot policies for AI opponents and hints
- Room hosting for authoritative multiplayer
"""

__version__ = "0.1.0"
