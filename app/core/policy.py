# app/core/policy.py
"""
Row-level authorization for every data operation.

Each (table, operation) pair has one rule. A rule receives the caller's
identity id (None for guests) and the row being read or written, and
answers allow/deny. Services call `AccessPolicy.authorize` before they
touch the database and `AccessPolicy.read_filter` to scope list queries,
so every client of the service gets the same guarantees regardless of
what it checked on its own side.

Rules are evaluated on every call; nothing is cached. A missing rule
means deny.
"""
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from sqlalchemy import false
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, select

from app.models.purchase import Purchase
from app.models.sweet import Sweet
from app.models.user import AppRole, Profile, RoleGrant

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    READ = "read"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class AccessDenied(Exception):
    """
    Raised when a policy rule rejects an operation.

    The message names the table and operation for logs; the HTTP layer
    never forwards it to the client.
    """

    def __init__(self, model: type, operation: Operation):
        self.model = model
        self.operation = operation
        super().__init__(f"{operation.value} on {model.__tablename__} denied")


def _has_role(session: Session, identity_id: uuid.UUID, role: AppRole) -> bool:
    """
    Trusted-context role membership check.

    Reads user_roles directly, without applying the RoleGrant read rule
    it helps enforce. Only this module may call it.
    """
    stmt = (
        select(RoleGrant.id)
        .where(RoleGrant.user_id == identity_id)
        .where(RoleGrant.role == role)
    )
    return session.exec(stmt).first() is not None


@dataclass(frozen=True)
class _Caller:
    session: Session
    identity_id: uuid.UUID | None

    @property
    def authenticated(self) -> bool:
        return self.identity_id is not None

    def is_admin(self) -> bool:
        return self.authenticated and _has_role(
            self.session, self.identity_id, AppRole.admin
        )


Rule = Callable[[_Caller, Any], bool]


def _public(caller: _Caller, row: Any) -> bool:
    return True


def _admin_only(caller: _Caller, row: Any) -> bool:
    return caller.is_admin()


def _own_profile(caller: _Caller, row: Profile) -> bool:
    return caller.authenticated and row.id == caller.identity_id


def _own_role_grant(caller: _Caller, row: RoleGrant) -> bool:
    return caller.authenticated and row.user_id == caller.identity_id


def _own_purchase(caller: _Caller, row: Purchase) -> bool:
    return caller.authenticated and row.user_id == caller.identity_id


def _own_purchase_or_admin(caller: _Caller, row: Purchase) -> bool:
    return _own_purchase(caller, row) or caller.is_admin()


RULES: dict[tuple[type, Operation], Rule] = {
    (Profile, Operation.READ): _own_profile,
    (Profile, Operation.UPDATE): _own_profile,
    (RoleGrant, Operation.READ): _own_role_grant,
    (Sweet, Operation.READ): _public,
    (Sweet, Operation.INSERT): _admin_only,
    (Sweet, Operation.UPDATE): _admin_only,
    (Sweet, Operation.DELETE): _admin_only,
    (Purchase, Operation.INSERT): _own_purchase,
    (Purchase, Operation.READ): _own_purchase_or_admin,
}


class AccessPolicy:
    """
    Entry point used by services.

    Usage:

        policy.authorize(session, caller_id, Operation.UPDATE, Sweet, sweet)
        clause = policy.read_filter(session, caller_id, Purchase)
    """

    def __init__(self, rules: dict[tuple[type, Operation], Rule] | None = None):
        self.rules = RULES if rules is None else rules

    def authorize(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        operation: Operation,
        model: type,
        row: Any = None,
    ) -> None:
        """
        Evaluate the rule for (model, operation) against `row`.

        Raises:
            AccessDenied: if no rule exists or the rule rejects the row.
        """
        rule = self.rules.get((model, operation))
        caller = _Caller(session=session, identity_id=caller_id)
        if rule is None or not rule(caller, row):
            logger.warning(
                "Policy denied %s on %s for caller %s",
                operation.value,
                model.__tablename__,
                caller_id or "anonymous",
            )
            raise AccessDenied(model, operation)

    def read_filter(
        self,
        session: Session,
        caller_id: uuid.UUID | None,
        model: type,
    ) -> ColumnElement[bool] | None:
        """
        WHERE clause restricting a list query to rows the caller may read.

        Returns None when every row is visible.
        """
        caller = _Caller(session=session, identity_id=caller_id)
        rule = self.rules.get((model, Operation.READ))

        if rule is None:
            return false()
        if rule is _public:
            return None
        if not caller.authenticated:
            return false()

        if model is Purchase:
            if caller.is_admin():
                return None
            return Purchase.user_id == caller_id
        if model is Profile:
            return Profile.id == caller_id
        if model is RoleGrant:
            return RoleGrant.user_id == caller_id
        return false()

    def is_admin(self, session: Session, caller_id: uuid.UUID | None) -> bool:
        """
        Whether the caller holds the admin role.

        For display only (e.g. showing the admin panel); writes still go
        through `authorize`.
        """
        return _Caller(session=session, identity_id=caller_id).is_admin()


policy = AccessPolicy()
