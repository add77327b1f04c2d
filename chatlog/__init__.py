"""chatlog - contact label resolution for exported chat databases.

Provides configuration, the error hierarchy, and shared utilities used by
the integrations that read exported contact databases.
"""

__version__ = "1.0.0"
