"""
Feature modules for the GateKeeper backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- repository.py: Supabase and in-memory storage
- service.py: Business logic implementation
- routes.py: FastAPI route handlers (where the module exposes HTTP)
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
"""
