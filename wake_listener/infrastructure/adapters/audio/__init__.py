# wake_listener/infrastructure/adapters/audio/__init__.py

"""
Audio adapters.

Import the concrete module you need; sounddevice needs PortAudio at import
time, so nothing is imported eagerly here.
"""
