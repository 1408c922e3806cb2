"""Versioned schema migration units.

Each module defines ``version`` (int), ``name`` (str) and
``upgrade(conn)``; ``ledgerkit.migrations.registry`` collects them.
"""
