"""
Pytest fixtures for Indigo Docs tests.

Fixtures are organized by test category:
- hq.py: HQ folder layouts (scopes, dotted and excluded directories, symlinks)
- watcher.py: ChangeWatcher fixtures and a thread-safe event collector
"""
