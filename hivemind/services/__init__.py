"""Application services layer.

Services coordinate the domain rules with a data store (lifecycle operations,
session, accounts, read models). They should avoid UI concerns.
"""
