"""Infrastructure Layer — database, blob storage, identity provider, mail, dispatch, logging.

Invariants:
    - Implements the boundary Protocols declared in core/repository_protocols.py
    - Every component is instantiated once in the FastAPI lifespan and injected;
      nothing here holds module-level state
"""
