"""Core Application Layer: tier composition, strategies and maintenance.

Connects the domain layer with the infrastructure layer through interfaces.
Contains the smart cache facade, the cache registry and the command handler.
"""
