"""
Converted MongoDB Collections

Provides a typed interception layer around Motor's `AsyncIOMotorCollection`
and PyMongo's `Collection` / `AsyncCollection` objects.

This module is part of MDB_CONVERT.

Core Features:
- `Converter`: The five transforms applied around a collection
  (`pre_insert`, `pre_update`, `pre_replace`, `post_find`, `delete_filter`).
- `ConvertedCollection`: Proxies a collection. Writes are rewritten into the
  stored shape before they reach the driver, reads are rewritten into the
  public shape on the way out, and delete filters are rewritten before
  documents are selected. Every other attribute is forwarded untouched.
- `convert_raw_collection` / `convert_read_write_collection`: Factories.

The wrapper keeps the driver's calling contract: same method names, same
arguments, same return shapes. Async drivers get awaitables back, sync
drivers get values, and `find` returns a lazily converted cursor either way.
Driver and transform errors propagate unchanged.
"""

import dataclasses
import logging
from typing import Any, Generic, Iterable, Mapping, Optional

from .config import ConverterConfig, get_config
from .constants import DEFAULT_MAX_METRICS, TRANSFORM_NAMES
from .cursor import ConvertedCursor, then
from .exceptions import ConverterConfigurationError
from .observability import get_logger, log_operation, timed_transform
from .types import (FindAndModifyResult, ModifyResult, TFilter, TFound,
                    TInsertPublic, TInsertStored, TRead, TReplacePublic,
                    TReplaceStored, Transform, TReturn, TUpdatePublic,
                    TUpdateStored, TWritePublic, TWriteStored)

logger = get_logger(__name__)


def _resolve_config() -> ConverterConfig:
    """
    Global configuration for a new wrapper.

    A malformed environment disables metrics and call logging for the
    wrapper instead of failing the wrap.
    """
    try:
        return get_config()
    except ConverterConfigurationError as e:
        logger.warning(f"Ignoring invalid converter configuration: {e}")
        return ConverterConfig(
            record_metrics=False, max_metrics=DEFAULT_MAX_METRICS, log_calls=False
        )


@dataclasses.dataclass(frozen=True)
class Converter(
    Generic[
        TInsertStored,
        TInsertPublic,
        TUpdateStored,
        TUpdatePublic,
        TReplaceStored,
        TReplacePublic,
        TFilter,
        TFound,
        TReturn,
    ]
):
    """
    The transforms applied by a converted collection.

    Every transform must be total over its input type and free of side
    effects; the wrapper passes whatever a transform returns and never
    mutates the caller's arguments itself.

    Attributes:
        pre_insert: Public insert document -> stored insert document
        pre_update: Public update specification -> stored update specification
        pre_replace: Public replacement document -> stored replacement document
        post_find: Stored document (with ``_id``) -> public document
        delete_filter: Delete filter -> filter used to select stored documents

    Raises:
        ConverterConfigurationError: If any transform is not callable
    """

    pre_insert: Transform[TInsertPublic, TInsertStored]
    pre_update: Transform[TUpdatePublic, TUpdateStored]
    pre_replace: Transform[TReplacePublic, TReplaceStored]
    post_find: Transform[TFound, TReturn]
    delete_filter: Transform[TFilter, TFilter]

    def __post_init__(self) -> None:
        for name in TRANSFORM_NAMES:
            transform = getattr(self, name)
            if not callable(transform):
                raise ConverterConfigurationError(
                    f"Converter transform '{name}' must be callable",
                    config_key=name,
                    config_value=type(transform).__name__,
                )


def convert_modify_result(
    result: FindAndModifyResult[Any], post_find: Transform[Any, Any]
) -> FindAndModifyResult[Any]:
    """
    Convert the outcome of a ``find_one_and_*`` call.

    ``post_find`` runs only when a document is present. A `ModifyResult`
    keeps all of its other fields; a bare document is converted directly and
    ``None`` passes through.
    """
    if isinstance(result, ModifyResult):
        if result.value is None:
            return result
        return dataclasses.replace(result, value=post_find(result.value))
    if result is None:
        return None
    return post_find(result)


class ConvertedCollection(Generic[TInsertPublic, TUpdatePublic, TReplacePublic, TFilter, TReturn]):
    """
    Wraps a collection so documents are converted on the way in and out.

    Intercepted operations (see `mdb_convert.constants.INTERCEPTED_METHODS`):

    - ``insert_one``, ``insert_many``, ``insert``: ``pre_insert`` on each document
    - ``update_one``, ``update_many``, ``update``: ``pre_update`` on the update
    - ``replace_one``: ``pre_replace`` on the replacement
    - ``delete_one``, ``delete_many``: ``delete_filter`` on the filter
    - ``find_one``: ``post_find`` on the document, if one was found
    - ``find``: ``post_find`` on each document as the cursor is consumed
    - ``find_one_and_delete`` / ``_replace`` / ``_update``: the matching
      pre-transform, then ``post_find`` on the returned document

    Anything else (``aggregate``, ``count_documents``, ``bulk_write``, index
    management, ...) is the wrapped collection's own attribute, returned as-is.
    A `ConvertedCollection` can itself be wrapped again; the layers then apply
    one after the other.
    """

    __slots__ = (
        "_collection",
        "_converter",
        "_name",
        "_pre_insert",
        "_pre_update",
        "_pre_replace",
        "_post_find",
        "_delete_filter",
        "_log_calls",
    )

    def __init__(self, collection: Any, converter: Converter):
        self._collection = collection
        self._converter = converter
        self._name = getattr(collection, "name", None)

        config = _resolve_config()
        transforms = {name: getattr(converter, name) for name in TRANSFORM_NAMES}
        if config.record_metrics:
            transforms = {
                name: timed_transform(name, transform, collection=self._name)
                for name, transform in transforms.items()
            }
        self._pre_insert = transforms["pre_insert"]
        self._pre_update = transforms["pre_update"]
        self._pre_replace = transforms["pre_replace"]
        self._post_find = transforms["post_find"]
        self._delete_filter = transforms["delete_filter"]
        self._log_calls = config.log_calls

    def _trace(self, operation: str) -> None:
        if self._log_calls:
            log_operation(
                logger,
                f"converter.{operation}",
                level=logging.DEBUG,
                collection=self._name,
            )

    def _convert_found(self, document: Optional[Any]) -> Optional[TReturn]:
        if document is None:
            return None
        return self._post_find(document)

    def _convert_modify_result(self, result: Any) -> Any:
        return convert_modify_result(result, self._post_find)

    # --- Writes ---

    def insert_one(self, document: TInsertPublic, *args, **kwargs):
        """Insert ``pre_insert(document)``."""
        self._trace("insert_one")
        return self._collection.insert_one(self._pre_insert(document), *args, **kwargs)

    def insert_many(self, documents: Iterable[TInsertPublic], *args, **kwargs):
        """
        Insert ``pre_insert`` of every document.

        Converted documents are collected in a new list; the caller's
        documents and sequence are left alone.
        """
        self._trace("insert_many")
        converted = [self._pre_insert(doc) for doc in documents]
        return self._collection.insert_many(converted, *args, **kwargs)

    def insert(self, doc_or_docs, *args, **kwargs):
        """Legacy insert of one document or a sequence of documents."""
        self._trace("insert")
        if isinstance(doc_or_docs, Mapping):
            converted = self._pre_insert(doc_or_docs)
        else:
            converted = [self._pre_insert(doc) for doc in doc_or_docs]
        return self._collection.insert(converted, *args, **kwargs)

    def update_one(self, filter: Mapping[str, Any], update: TUpdatePublic, *args, **kwargs):
        self._trace("update_one")
        return self._collection.update_one(filter, self._pre_update(update), *args, **kwargs)

    def update_many(self, filter: Mapping[str, Any], update: TUpdatePublic, *args, **kwargs):
        self._trace("update_many")
        return self._collection.update_many(filter, self._pre_update(update), *args, **kwargs)

    def update(self, spec: Mapping[str, Any], document: TUpdatePublic, *args, **kwargs):
        """Legacy update; ``document`` is the update specification."""
        self._trace("update")
        return self._collection.update(spec, self._pre_update(document), *args, **kwargs)

    def replace_one(
        self, filter: Mapping[str, Any], replacement: TReplacePublic, *args, **kwargs
    ):
        self._trace("replace_one")
        return self._collection.replace_one(
            filter, self._pre_replace(replacement), *args, **kwargs
        )

    # --- Deletes ---

    def delete_one(self, filter: TFilter, *args, **kwargs):
        self._trace("delete_one")
        return self._collection.delete_one(self._delete_filter(filter), *args, **kwargs)

    def delete_many(self, filter: TFilter, *args, **kwargs):
        self._trace("delete_many")
        return self._collection.delete_many(self._delete_filter(filter), *args, **kwargs)

    # --- Reads ---

    def find_one(self, *args, **kwargs):
        """
        Find one document and apply ``post_find`` to it.

        ``None`` (nothing matched) is returned as-is. Awaitable when the
        wrapped collection is async.
        """
        self._trace("find_one")
        return then(self._collection.find_one(*args, **kwargs), self._convert_found)

    def find(self, *args, **kwargs) -> ConvertedCursor[TReturn]:
        """
        Return a cursor whose documents are converted as they are consumed.
        """
        self._trace("find")
        return then(
            self._collection.find(*args, **kwargs),
            lambda cursor: ConvertedCursor(cursor, self._post_find),
        )

    def find_one_and_delete(self, filter: Mapping[str, Any], *args, **kwargs):
        self._trace("find_one_and_delete")
        return then(
            self._collection.find_one_and_delete(filter, *args, **kwargs),
            self._convert_modify_result,
        )

    def find_one_and_replace(
        self, filter: Mapping[str, Any], replacement: TReplacePublic, *args, **kwargs
    ):
        self._trace("find_one_and_replace")
        return then(
            self._collection.find_one_and_replace(
                filter, self._pre_replace(replacement), *args, **kwargs
            ),
            self._convert_modify_result,
        )

    def find_one_and_update(
        self, filter: Mapping[str, Any], update: TUpdatePublic, *args, **kwargs
    ):
        self._trace("find_one_and_update")
        return then(
            self._collection.find_one_and_update(
                filter, self._pre_update(update), *args, **kwargs
            ),
            self._convert_modify_result,
        )

    # --- Pass-through ---

    def __getattr__(self, name: str) -> Any:
        # Reached only for attributes not defined above.
        if name in ConvertedCollection.__slots__:
            raise AttributeError(name)
        return getattr(self._collection, name)

    def __getitem__(self, name: str) -> Any:
        return self._collection[name]

    # Special methods bypass __getattr__, so forward them explicitly.

    def __bool__(self) -> bool:
        return bool(self._collection)

    def __eq__(self, other: Any) -> bool:
        return self._collection == other

    def __ne__(self, other: Any) -> bool:
        return self._collection != other

    def __hash__(self) -> int:
        return hash(self._collection)

    def __repr__(self) -> str:
        return f"ConvertedCollection({self._collection!r})"


def convert_raw_collection(
    collection: Any,
    converter: Converter[
        TInsertStored,
        TInsertPublic,
        TUpdateStored,
        TUpdatePublic,
        TReplaceStored,
        TReplacePublic,
        TFilter,
        TFound,
        TReturn,
    ],
) -> ConvertedCollection[TInsertPublic, TUpdatePublic, TReplacePublic, TFilter, TReturn]:
    """
    Wrap ``collection`` so it speaks the public shapes of ``converter``.

    No data is copied and nothing is validated here; the returned wrapper is
    valid for as long as ``collection`` is.

    Example:
        users = convert_raw_collection(db.users, Converter(
            pre_insert=lambda doc: {**doc, "owner": owner_id},
            pre_update=lambda update: update,
            pre_replace=lambda doc: {**doc, "owner": owner_id},
            post_find=lambda doc: {k: v for k, v in doc.items() if k != "owner"},
            delete_filter=lambda f: {"$and": [f, {"owner": owner_id}]},
        ))
        await users.insert_one({"name": "Ada"})
    """
    logger.debug("Converting collection '%s'", getattr(collection, "name", None))
    return ConvertedCollection(collection, converter)


def convert_read_write_collection(
    collection: Any,
    converter: Converter[
        TWriteStored,
        TWritePublic,
        TWriteStored,
        TWritePublic,
        TWriteStored,
        TWritePublic,
        TRead,
        TRead,
        TRead,
    ],
) -> ConvertedCollection[TWritePublic, TWritePublic, TWritePublic, TRead, TRead]:
    """
    Wrap a collection whose inserts, updates and replacements share one write
    schema and whose reads and filters share one read schema.
    """
    return convert_raw_collection(collection, converter)
