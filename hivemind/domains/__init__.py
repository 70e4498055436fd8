"""Domain layer (business rules and domain models).

Domain modules should not depend on storage. Transition rules are pure functions
over entities; infrastructure access is injected into the services layer.
"""
