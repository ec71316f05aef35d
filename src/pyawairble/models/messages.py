"""Decoded inbound messages.

The sensor answers with either a single JSON object or an array of
objects. :class:`DecodedMessage` keeps the two shapes apart with an
explicit ``kind`` tag instead of guessing from the payload later on.
"""

from __future__ import annotations

import enum
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class MessageKind(enum.StrEnum):
    OBJECT = "object"
    ARRAY = "array"


class DecodedMessage(BaseModel):
    """One complete JSON document received from the sensor.

    Exactly one of ``obj`` (for :attr:`MessageKind.OBJECT`) or ``items``
    (for :attr:`MessageKind.ARRAY`) is populated.
    """

    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    obj: dict[str, Any] | None = None
    items: list[dict[str, Any]] | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> DecodedMessage:
        if self.kind is MessageKind.OBJECT:
            if self.obj is None or self.items is not None:
                raise ValueError("object message must populate obj only")
        elif self.items is None or self.obj is not None:
            raise ValueError("array message must populate items only")
        return self

    @classmethod
    def from_json(cls, value: Any) -> DecodedMessage | None:
        """Wrap a decoded JSON value, or return ``None`` for unsupported shapes.

        Only objects and arrays whose elements are all objects are
        messages; scalars and mixed arrays are not.
        """
        if isinstance(value, dict):
            return cls(kind=MessageKind.OBJECT, obj=value)
        if isinstance(value, list) and all(isinstance(item, dict) for item in value):
            return cls(kind=MessageKind.ARRAY, items=value)
        return None

    @property
    def is_object(self) -> bool:
        return self.kind is MessageKind.OBJECT

    @property
    def state(self) -> Any:
        """The ``state`` field of an object message, ``None`` otherwise."""
        if self.obj is None:
            return None
        return self.obj.get("state")

    def get(self, key: str, default: Any = None) -> Any:
        if self.obj is None:
            return default
        return self.obj.get(key, default)

    def to_json(self) -> str:
        value: Any = self.obj if self.obj is not None else self.items
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    def __str__(self) -> str:
        return self.to_json()
