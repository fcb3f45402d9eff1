"""Domain services for the party site.

Routes and socket handlers import from here; these modules own the database
reads and writes so HTTP concerns stay in ``squares_party.api``.
"""
