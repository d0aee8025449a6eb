"""EventSync package.

Feature modules (tracking, events, teams, messages, ...) each keep a thin Flask
controller over service and repository layers.
"""
