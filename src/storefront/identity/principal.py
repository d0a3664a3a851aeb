"""Authenticated caller as handed over by the identity collaborator."""

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Who is calling, and in which role.

    Produced once at the edge (see ``storefront.api.dependencies``) and passed
    down explicitly. Nothing downstream looks identities up again or treats a
    particular id as special.
    """

    customer_id: str
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def can_act_for(self, owner_id: str) -> bool:
        """Owners act on their own records; administrators on anyone's."""
        return self.is_admin or str(owner_id) == str(self.customer_id)

    @classmethod
    def customer(cls, customer_id: str) -> "Principal":
        return cls(customer_id=str(customer_id), role=Role.CUSTOMER)

    @classmethod
    def admin(cls, customer_id: str) -> "Principal":
        return cls(customer_id=str(customer_id), role=Role.ADMIN)
