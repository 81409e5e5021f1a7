"""Client/project/task tracker with a typed query/mutation API."""

__version__ = "0.1.0"
