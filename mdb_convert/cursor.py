"""
Lazily converted cursors.

`ConvertedCursor` wraps the cursor returned by a collection's ``find`` and
applies a transform to each document as it is consumed. It works on top of
PyMongo's synchronous ``Cursor`` as well as Motor's ``AsyncIOMotorCursor``
and PyMongo's ``AsyncCursor``; which iteration protocol is available depends
only on the wrapped cursor.

The cursor is never materialized by the adapter. Stopping iteration early
stops pulling from the wrapped cursor, and ``close()`` reaches it directly.
"""

import inspect
from typing import Any, Awaitable, Callable, Generic, List, TypeVar, Union

T = TypeVar("T")
R = TypeVar("R")


def then(result: Union[T, Awaitable[T]], transform: Callable[[T], R]) -> Union[R, Awaitable[R]]:
    """
    Apply ``transform`` to ``result`` in the same concurrency shape.

    A plain value is transformed immediately. An awaitable (Motor future,
    coroutine) yields a coroutine that awaits it and transforms the outcome.
    """
    if inspect.isawaitable(result):
        return _await_then(result, transform)
    return transform(result)


async def _await_then(awaitable: Awaitable[T], transform: Callable[[T], R]) -> R:
    return transform(await awaitable)


class ConvertedCursor(Generic[R]):
    """
    Cursor adapter applying ``transform`` to each document on demand.

    Chainable modifiers (``sort``, ``limit``, ``skip``, ``batch_size``,
    ``rewind``...) return the adapter itself so ``find(...).sort(...)``
    keeps converting. Any other cursor attribute is forwarded unchanged.
    """

    __slots__ = ("_cursor", "_transform")

    def __init__(self, cursor: Any, transform: Callable[[Any], R]):
        self._cursor = cursor
        self._transform = transform

    @property
    def delegate(self) -> Any:
        """The wrapped driver cursor."""
        return self._cursor

    # --- Synchronous iteration (PyMongo) ---

    def __iter__(self) -> "ConvertedCursor[R]":
        return self

    def __next__(self) -> R:
        return self._transform(next(self._cursor))

    def next(self) -> Union[R, Awaitable[R]]:
        """Advance the cursor; awaitable when the wrapped cursor is async."""
        return then(self._cursor.next(), self._transform)

    # --- Asynchronous iteration (Motor, PyMongo async) ---

    def __aiter__(self) -> "ConvertedCursor[R]":
        return self

    async def __anext__(self) -> R:
        document = await self._cursor.__anext__()
        return self._transform(document)

    def to_list(self, *args: Any, **kwargs: Any) -> Union[List[R], Awaitable[List[R]]]:
        """
        Drain the cursor into a list, as the wrapped cursor's ``to_list``.

        Motor's ``length`` argument bounds how many documents are pulled and
        converted.
        """
        return then(
            self._cursor.to_list(*args, **kwargs),
            lambda documents: [self._transform(doc) for doc in documents],
        )

    # --- Indexing and cloning ---

    def __getitem__(self, index: Union[int, slice]) -> Union[R, "ConvertedCursor[R]"]:
        result = self._cursor[index]
        if isinstance(index, slice):
            return self._rewrap(result)
        return self._transform(result)

    def clone(self) -> "ConvertedCursor[R]":
        return ConvertedCursor(self._cursor.clone(), self._transform)

    # --- Context management ---

    def __enter__(self) -> "ConvertedCursor[R]":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._cursor.close()

    async def __aenter__(self) -> "ConvertedCursor[R]":
        await self._cursor.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> Any:
        return await self._cursor.__aexit__(exc_type, exc_val, exc_tb)

    # --- Everything else ---

    def _rewrap(self, result: Any) -> Any:
        if result is self._cursor:
            return self
        return result

    def __getattr__(self, name: str) -> Any:
        if name in ConvertedCursor.__slots__:
            raise AttributeError(name)
        attr = getattr(self._cursor, name)
        if not callable(attr):
            return attr

        def forward(*args: Any, **kwargs: Any) -> Any:
            return self._rewrap(attr(*args, **kwargs))

        return forward

    def __repr__(self) -> str:
        return f"ConvertedCursor({self._cursor!r})"
