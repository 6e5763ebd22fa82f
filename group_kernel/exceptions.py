"""
Typed Exception Hierarchy for the Group Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Hierarchy and consolidation errors are data-integrity checks.  Callers must
be able to tell them apart without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Every exception has an HTTP_STATUS attribute for a service boundary
  4. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        service.create_company(data)
    except Exception as e:
        if "must have a parent" in str(e):  # FRAGILE
            ...

Example - RIGHT way (what this module enables):
    try:
        service.create_company(data)
    except HierarchyValidationError as e:
        return e.http_status, e.to_dict()

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from GroupKernelError:

    GroupKernelError (base, 500)
    |
    +-- ValidationError (400)
    |   +-- MissingRequiredFieldError
    |   +-- InvalidFieldValueError
    |   +-- DuplicateCompanyCodeError
    |   +-- DuplicateAccountCodeError
    |   +-- HierarchyValidationError
    |   |   +-- ParentCompanyNotFoundError
    |   +-- ImmutableCompanyFieldError
    |   +-- InvalidParentAccountError
    |   +-- HeaderAccountBalanceError
    |   +-- AccountDefinitionConflictError
    |   +-- InvalidEliminationError
    |   +-- ConsolidationRootError
    |   +-- InvalidStatusTransitionError
    |   +-- DepthExceededError
    |
    +-- NotFoundError (404)
    |   +-- CompanyNotFoundError
    |   +-- AccountNotFoundError
    |   +-- EliminationNotFoundError
    |   +-- TransactionNotFoundError
    |
    +-- HasChildrenError (400)
    |
    +-- UnsupportedConsolidationScopeError (501)

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                        | When Raised
-------------|-----------------------------|-------------------------------------------
Validation   | MISSING_REQUIRED_FIELD      | name/code/type/currency absent on create
             | INVALID_FIELD_VALUE         | code > 10 chars, bad currency, amount <= 0
             | DUPLICATE_COMPANY_CODE      | Company code already exists
             | DUPLICATE_ACCOUNT_CODE      | Account code already exists in company
             | HIERARCHY_VIOLATION         | Type/parent rule broken
             | PARENT_NOT_FOUND            | parent_id does not resolve
             | IMMUTABLE_COMPANY_FIELD     | Patch touches type/parent/level/root
             | INVALID_PARENT_ACCOUNT      | Parent account missing or postable
             | HEADER_ACCOUNT_BALANCE      | Balance set on a header account
             | ACCOUNT_DEFINITION_CONFLICT | Code is a header in one chart, postable in another
             | INVALID_ELIMINATION         | Elimination targets a header account
             | INVALID_CONSOLIDATION_ROOT  | Consolidation root is not a holding
             | INVALID_STATUS_TRANSITION   | IC transaction status jump not allowed
             | DEPTH_EXCEEDED              | Level would exceed 3
-------------|-----------------------------|-------------------------------------------
Not found    | COMPANY_NOT_FOUND           | Company id does not exist
             | ACCOUNT_NOT_FOUND           | Account id does not exist
             | ELIMINATION_NOT_FOUND       | Elimination id does not exist
             | TRANSACTION_NOT_FOUND       | IC transaction id does not exist
-------------|-----------------------------|-------------------------------------------
Delete       | HAS_CHILDREN                | Company/account still has children
-------------|-----------------------------|-------------------------------------------
Scope        | UNSUPPORTED_CONSOLIDATION_SCOPE | proportional / equity requested

===============================================================================
"""

from typing import Any


class GroupKernelError(Exception):
    """
    Base exception for all group kernel errors.

    All subclasses must have ``code`` and ``http_status`` class attributes.
    """

    code: str = "GROUP_KERNEL_ERROR"
    http_status: int = 500

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.code

    def to_dict(self) -> dict[str, Any]:
        """Render as the error body of a JSON response."""
        return {"error": self.message, "code": self.code}


# Validation


class ValidationError(GroupKernelError):
    """Base exception for input and rule violations."""

    code: str = "VALIDATION_ERROR"
    http_status: int = 400


class MissingRequiredFieldError(ValidationError):
    """One or more required fields were not supplied."""

    code: str = "MISSING_REQUIRED_FIELD"

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Missing required fields: {', '.join(fields)}")


class InvalidFieldValueError(ValidationError):
    """A field value is out of its allowed shape or range."""

    code: str = "INVALID_FIELD_VALUE"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for {field}: {reason}")


class DuplicateCompanyCodeError(ValidationError):
    """Company code is already used by another company."""

    code: str = "DUPLICATE_COMPANY_CODE"

    def __init__(self, company_code: str):
        self.company_code = company_code
        super().__init__("Company code already exists")


class DuplicateAccountCodeError(ValidationError):
    """Account code already exists in the company's chart of accounts."""

    code: str = "DUPLICATE_ACCOUNT_CODE"

    def __init__(self, company_id: str, account_code: str):
        self.company_id = company_id
        self.account_code = account_code
        super().__init__(
            f"Account code {account_code} already exists for company {company_id}"
        )


class HierarchyValidationError(ValidationError):
    """A company type / parent combination breaks the 3-level chain."""

    code: str = "HIERARCHY_VIOLATION"

    def __init__(self, message: str, company_type: str | None = None, parent_id: str | None = None):
        self.company_type = company_type
        self.parent_id = parent_id
        super().__init__(message)


class ParentCompanyNotFoundError(HierarchyValidationError):
    """The referenced parent company does not exist."""

    code: str = "PARENT_NOT_FOUND"

    def __init__(self, parent_id: str, company_type: str | None = None):
        super().__init__(
            "Parent company not found.",
            company_type=company_type,
            parent_id=parent_id,
        )


class ImmutableCompanyFieldError(ValidationError):
    """Update patch tried to change a structural company field."""

    code: str = "IMMUTABLE_COMPANY_FIELD"

    def __init__(self, company_id: str, fields: list[str]):
        self.company_id = company_id
        self.fields = fields
        super().__init__(
            f"Company type, parent and level cannot be changed: {', '.join(fields)}"
        )


class InvalidParentAccountError(ValidationError):
    """Parent account is missing, belongs to another company, or is postable."""

    code: str = "INVALID_PARENT_ACCOUNT"

    def __init__(self, parent_id: str, reason: str):
        self.parent_id = parent_id
        self.reason = reason
        super().__init__(f"Invalid parent account {parent_id}: {reason}")


class HeaderAccountBalanceError(ValidationError):
    """Only postable accounts can hold a balance."""

    code: str = "HEADER_ACCOUNT_BALANCE"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(
            f"Account {account_code} is a header account and cannot hold a balance"
        )


class AccountDefinitionConflictError(ValidationError):
    """An account code is a header in one company and postable in another."""

    code: str = "ACCOUNT_DEFINITION_CONFLICT"

    def __init__(self, account_code: str, header_company_id: str, postable_company_id: str):
        self.account_code = account_code
        self.header_company_id = header_company_id
        self.postable_company_id = postable_company_id
        super().__init__(
            f"Account {account_code} is a header in company {header_company_id} "
            f"but postable in company {postable_company_id}"
        )


class InvalidEliminationError(ValidationError):
    """Elimination entry cannot be applied."""

    code: str = "INVALID_ELIMINATION"

    def __init__(self, elimination_id: str, reason: str):
        self.elimination_id = elimination_id
        self.reason = reason
        super().__init__(f"Invalid elimination {elimination_id}: {reason}")


class ConsolidationRootError(ValidationError):
    """Consolidation was requested for a company that is not a holding."""

    code: str = "INVALID_CONSOLIDATION_ROOT"

    def __init__(self, company_id: str):
        self.company_id = company_id
        super().__init__("Only holding companies can consolidate.")


class InvalidStatusTransitionError(ValidationError):
    """Inter-company transaction status change is not allowed."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, transaction_id: str, from_status: str, to_status: str):
        self.transaction_id = transaction_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Transaction {transaction_id} cannot move from {from_status} to {to_status}"
        )


class DepthExceededError(ValidationError):
    """Creating the record would exceed the 3-level limit."""

    code: str = "DEPTH_EXCEEDED"

    def __init__(self, level: int, max_level: int = 3):
        self.level = level
        self.max_level = max_level
        super().__init__(f"Cannot create companies deeper than level {max_level}")


# Not found


class NotFoundError(GroupKernelError):
    """Base exception for unresolvable id references."""

    code: str = "NOT_FOUND"
    http_status: int = 404


class CompanyNotFoundError(NotFoundError):
    """Company with given ID was not found."""

    code: str = "COMPANY_NOT_FOUND"

    def __init__(self, company_id: str):
        self.company_id = company_id
        super().__init__("Company not found")


class AccountNotFoundError(NotFoundError):
    """Account with given ID was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class EliminationNotFoundError(NotFoundError):
    """Elimination entry with given ID was not found."""

    code: str = "ELIMINATION_NOT_FOUND"

    def __init__(self, elimination_id: str):
        self.elimination_id = elimination_id
        super().__init__(f"Elimination entry not found: {elimination_id}")


class TransactionNotFoundError(NotFoundError):
    """Inter-company transaction with given ID was not found."""

    code: str = "TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Inter-company transaction not found: {transaction_id}")


# Delete guards


class HasChildrenError(GroupKernelError):
    """Delete blocked because other records reference this one as parent."""

    code: str = "HAS_CHILDREN"
    http_status: int = 400

    def __init__(
        self,
        entity: str,
        entity_id: str,
        child_count: int,
        dependent: str = "children",
    ):
        self.entity = entity
        self.entity_id = entity_id
        self.child_count = child_count
        self.dependent = dependent
        super().__init__(f"Cannot delete {entity} with {dependent}")


# Consolidation scope


class UnsupportedConsolidationScopeError(GroupKernelError):
    """Requested consolidation method is not implemented."""

    code: str = "UNSUPPORTED_CONSOLIDATION_SCOPE"
    http_status: int = 501

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(f"Consolidation scope '{scope}' is not implemented")
