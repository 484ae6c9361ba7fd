"""fleet-common: shared primitives for fleet services.

- ``errors``: exception taxonomy and Ok/Err result values
- ``guard``: argument and state assertions
- ``validation``: declarative model validation
"""
from .guard import Guard

__version__ = "0.1.0"

__all__ = ["Guard", "__version__"]
