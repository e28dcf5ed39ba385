"""Generic LIFO container shared by every stage of the expression pipeline."""
from typing import Callable, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class Stack(Generic[T]):
    """
    Last-in-first-out container.

    The top of the stack is the most recently pushed element.
    Reading from an empty stack never raises: ``pop`` and ``peek`` return ``None``.

    Examples:
        >>> s: Stack[int] = Stack()
        >>> s.push(1); s.push(2)
        >>> s.pop()
        2
        >>> list(s)
        [1]
    """

    def __init__(self) -> None:
        self._data: List[T] = []

    def push(self, item: T) -> None:
        """Put an item on top of the stack."""
        self._data.append(item)

    def pop(self) -> Optional[T]:
        """
        Remove and return the top item.

        :return: Top item, or None if the stack is empty
        :rtype: Optional[T]
        """
        if not self._data:
            return None
        return self._data.pop()

    def peek(self) -> Optional[T]:
        """
        Return the top item without removing it.

        :return: Top item, or None if the stack is empty
        :rtype: Optional[T]
        """
        if not self._data:
            return None
        return self._data[-1]

    def replace_top(self, item: T) -> Optional[T]:
        """
        Replace the top item in place.

        Nothing happens on an empty stack.

        :param T item: New top item

        :return: Previous top item, or None if the stack is empty
        :rtype: Optional[T]
        """
        if not self._data:
            return None
        previous = self._data[-1]
        self._data[-1] = item
        return previous

    def update(self, fn: Callable[[T], T]) -> None:
        """Apply fn to every item, keeping the order."""
        self._data[:] = [fn(item) for item in self._data]

    def drain(self) -> Iterator[T]:
        """
        Pop items until the stack is empty, top first.

        :return: Consuming iterator over the items
        :rtype: Iterator[T]
        """
        while self._data:
            yield self._data.pop()

    def clear(self) -> None:
        self._data.clear()

    def is_empty(self) -> bool:
        return not self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[T]:
        # Top to bottom, read-only
        return reversed(self._data)

    def __repr__(self) -> str:
        return f"Stack({self._data!r})"
