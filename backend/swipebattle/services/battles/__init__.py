"""Swipe-battle rules: who beat whom, what a pick is worth, where a session stands.

``candidate``, ``errors`` and ``session`` are plain Python and can be
exercised without an app. ``store``, ``scoring`` and ``stats`` count rows in
the ``battles`` table and need an application context.
"""
