"""core
Pure game-economy domain: draws, rewards, upgrades, state, derived views.
"""

API_VERSION = "core-v1-20261018"
