"""
Application Layer

Contains use cases and application services.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- services/: Resolver, session store, reaper, control panels and the playback controller
- sourcing/: Ordered fallback tiers and the stream acquirer
- interfaces/: Port interfaces for infrastructure adapters
"""
