"""
Type definitions for MDB_CONVERT.

Type variables describing the "stored" shapes a collection speaks and the
"public" shapes callers of a converted collection see, plus the modify-result
container returned by find-and-modify style operations.
"""

from dataclasses import dataclass, field
from typing import (Any, Callable, Dict, Generic, Mapping, Optional, TypeVar,
                    Union)

Document = Mapping[str, Any]
"""Any mapping-style MongoDB document."""

# Stored (collection-side) and public (caller-side) schemas
TInsertStored = TypeVar("TInsertStored", bound=Document)
TInsertPublic = TypeVar("TInsertPublic", bound=Document)
TUpdateStored = TypeVar("TUpdateStored", bound=Document)
TUpdatePublic = TypeVar("TUpdatePublic", bound=Document)
TReplaceStored = TypeVar("TReplaceStored", bound=Document)
TReplacePublic = TypeVar("TReplacePublic", bound=Document)
TFilter = TypeVar("TFilter", bound=Document)
TFound = TypeVar("TFound", bound=Document)
TReturn = TypeVar("TReturn", bound=Document)

# Shared-schema variant (insert, update and replace use one write schema)
TWriteStored = TypeVar("TWriteStored", bound=Document)
TWritePublic = TypeVar("TWritePublic", bound=Document)
TRead = TypeVar("TRead", bound=Document)

TDoc = TypeVar("TDoc")
TOut = TypeVar("TOut")

Transform = Callable[[TDoc], TOut]


@dataclass(frozen=True)
class ModifyResult(Generic[TDoc]):
    """
    Outcome of a find-and-modify operation with its metadata.

    PyMongo and Motor return the bare (optional) document from
    ``find_one_and_*``; handles that report the raw ``findAndModify`` reply
    return this container instead. Converted collections rewrite ``value``
    only and keep every other field untouched.

    Attributes:
        value: The affected document, or None if nothing matched
        ok: Server ``ok`` flag
        last_error_object: The ``lastErrorObject`` sub-document (n, upserted,
            updatedExisting)
        extra: Any other fields of the reply
    """

    value: Optional[TDoc] = None
    ok: float = 1.0
    last_error_object: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_reply(cls, reply: Mapping[str, Any]) -> "ModifyResult[Any]":
        """Build a result from a raw ``findAndModify`` command reply."""
        extra = {
            k: v for k, v in reply.items() if k not in ("value", "ok", "lastErrorObject")
        }
        return cls(
            value=reply.get("value"),
            ok=reply.get("ok", 1.0),
            last_error_object=reply.get("lastErrorObject"),
            extra=extra,
        )


FindAndModifyResult = Union[ModifyResult[TDoc], TDoc, None]
"""Either a full modify-result or the bare optional document."""
