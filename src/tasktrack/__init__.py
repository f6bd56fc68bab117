"""
Task Tracker backend package.

``tasktrack.main:app`` is the ASGI entry point built from environment
settings; ``tasktrack.main.create_app`` builds an app from explicit settings.
"""
