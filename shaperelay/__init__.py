"""
ShapeRelay - relays chat messages to a Shapes persona and routes replies back.
"""

__version__ = "0.3.0"
__logo__ = "🔁"
