"""Notification domain entity: message addressed to a user or a shop."""
from datetime import datetime
from typing import Optional

from grocer.domain.wire import (
    embedded_name, format_timestamp, normalize_id, parse_timestamp
)


class Notification:
    def __init__(self, id: Optional[str] = None, recipient_id: Optional[str] = None,
                 title: str = "", message: str = "", is_read: bool = False,
                 metadata: Optional[dict] = None, created_at: Optional[datetime] = None,
                 type: str = "", shop_name: str = ""):
        self.id = id
        self.recipient_id = recipient_id
        self.title = title
        self.message = message
        self.is_read = is_read
        self.metadata = metadata or {}
        self.created_at = created_at
        self.type = type
        self.shop_name = shop_name

    def __str__(self) -> str:
        return f"{self.title}: {self.message}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data) -> "Notification":
        d = data if isinstance(data, dict) else {}
        raw_recipient = d.get("userId") or d.get("recipient") or d.get("shopId")
        return Notification(
            id=normalize_id(d.get("_id", d.get("id"))),
            recipient_id=normalize_id(raw_recipient),
            title=str(d.get("title") or ""),
            message=str(d.get("message") or ""),
            is_read=bool(d.get("isRead", False)),
            metadata=d.get("metadata") if isinstance(d.get("metadata"), dict) else {},
            created_at=parse_timestamp(d.get("createdAt")),
            type=str(d.get("type") or ""),
            shop_name=embedded_name(d.get("shopId")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "recipientId": self.recipient_id,
            "title": self.title,
            "message": self.message,
            "isRead": self.is_read,
            "metadata": self.metadata,
            "createdAt": format_timestamp(self.created_at),
            "type": self.type,
            "shopName": self.shop_name,
        }
