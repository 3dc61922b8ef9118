"""Navigation: stack state, the controller, change signals, and observers.

The controller is the only writer of navigation state. Guards, signals,
and observers interact with it through its public operations.
"""
