"""HabitSphere - user identity and habit tracking API."""

__version__ = "0.1.0"
