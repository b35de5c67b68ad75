"""Cache Tier Implementations.

Provides the in-memory bounded recency cache (fast tier) and the adapter
that stores envelopes in a slow storage medium (session / persistent tiers).
Bounded Context: Cache Management
"""
