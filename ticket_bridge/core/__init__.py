"""
Core of the bridge: the sync adapter, its task registry and telemetry.
"""
