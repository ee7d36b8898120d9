"""Session: the acting user, passed explicitly into every workflow and remote call."""
from typing import Optional

from grocer.domain.wire import normalize_id
from grocer.utilities.constants import CONSUMER, ROLES, SHOPKEEPER


class Session:
    def __init__(self, user_id: str, role: str = CONSUMER, name: str = "", email: str = "",
                 phone: str = "", token: Optional[str] = None):
        if not user_id:
            raise ValueError("Session requires a user id")
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        self.user_id = user_id
        self.role = role
        self.name = name
        self.email = email
        self.phone = phone
        self.token = token

    @property
    def is_shopkeeper(self) -> bool:
        return self.role == SHOPKEEPER

    def contact(self):
        '''Customer contact snapshot copied into orders.'''
        return {"name": self.name, "email": self.email, "phone": self.phone or ""}

    @staticmethod
    def from_user(user: dict, token: Optional[str] = None) -> "Session":
        '''Builds a session from the user record returned by login.'''
        role = user.get("role") or CONSUMER
        return Session(
            user_id=normalize_id(user.get("_id", user.get("id"))),
            role=role if role in ROLES else CONSUMER,
            name=str(user.get("name") or ""),
            email=str(user.get("email") or ""),
            phone=str(user.get("phone") or ""),
            token=token or user.get("token"),
        )

    def __str__(self) -> str:
        return f"{self.role}:{self.user_id}"

    __repr__ = __str__
