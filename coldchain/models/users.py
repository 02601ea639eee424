"""Party references: users of the ledger and their roles."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class UserRole(str, Enum):
    MANUFACTURER = "manufacturer"
    LOGISTICS = "logistics"
    CONSUMER = "consumer"


class User(BaseModel):
    """A directory entry.  Shipments refer to users by id only."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: UserRole
    address: str = ""
