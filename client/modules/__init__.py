"""
Feature modules for the Localite auth client.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API (where it has one)
- models.py: Pydantic models for data transfer
- exceptions.py: Module-specific exceptions

Modules:
- profiles: profile store gateway (authoritative verification flag)
- identity: identity provider gateway over Supabase Auth
- verification: reconciler, resend cooldown, deep links, feature access
- session: session controller and restore gate

Modules communicate through interfaces, not concrete implementations.
"""
