"""
Strata - multi-DBMS data-access primitives.

- strata.core: Database facade, adapters, Broker, filters
"""

__version__ = "0.1.0"

# Re-export everything from the actual implementation
from strata.core import *  # noqa
