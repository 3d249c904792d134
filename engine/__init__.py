"""engine
Transitions, timers and the serialized session around the pure core.
"""
