"""Enumeration types for mirrored accounts and transactions."""

from enum import Enum


class AccountType(str, Enum):
    DEPOSITORY = "depository"
    CREDIT = "credit"
    LOAN = "loan"
    INVESTMENT = "investment"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "AccountType":
        """Map an upstream type string to a member, ``OTHER`` when unknown."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


class PaymentChannel(str, Enum):
    ONLINE = "online"
    IN_STORE = "in store"
    OTHER = "other"


class MergePolicy(str, Enum):
    """How a record field behaves when upstream sends a new version."""

    ALWAYS_OVERWRITE = "ALWAYS_OVERWRITE"
    PRESERVE_IF_PRESENT = "PRESERVE_IF_PRESENT"
    DEFAULT_ON_CREATE = "DEFAULT_ON_CREATE"
