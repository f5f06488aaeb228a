"""
Dash UI layer: layout, callbacks and the app factory.
Nothing in here owns filter state; every interaction goes through the Coordinator.
"""
