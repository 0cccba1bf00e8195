"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Contract is the billing aggregate root; charges scoped by contract_id
    - User owns its permissions

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from finnza.models.client import Client  # noqa: F401
from finnza.models.contract import Contract  # noqa: F401
from finnza.models.charge import Charge  # noqa: F401
from finnza.models.user import User  # noqa: F401
from finnza.models.permission import Permission  # noqa: F401
