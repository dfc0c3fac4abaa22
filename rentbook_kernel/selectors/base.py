"""
Module: rentbook_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  Selectors NEVER create, modify, or delete data.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: selectors return frozen records from
      ``rentbook_kernel.domain.records``, never ORM instances.
    - Session ownership: the caller owns the session and its transaction
      scope.  No snapshot isolation is added here; a report reflects whatever
      the session sees at query time.

Failure modes:
    - DataAccessError wrapping any SQLAlchemyError raised by a query.
"""

from abc import ABC
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rentbook_kernel.db.base import Base
from rentbook_kernel.exceptions import DataAccessError
from rentbook_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("selectors.base")


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return records.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session

    def _execute(self, operation: str, business_id: Any, statement) -> list:
        """
        Run a read query and return all result rows.

        Driver errors are re-raised as DataAccessError (with the original
        exception chained) so callers catch one typed failure.  No retry.
        """
        try:
            return list(self.session.execute(statement).all())
        except SQLAlchemyError as exc:
            logger.warning(
                "selector_query_failed",
                extra={"operation": operation, "business_id": str(business_id)},
            )
            raise DataAccessError(operation, str(business_id), str(exc)) from exc
