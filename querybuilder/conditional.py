"""
=====================================
Conditional branching in fluent chains.
=====================================

Lets a chain of builder calls contain if/elif/else branches:

    >>> query = (SelectQueryBuilder()
    ...     .from_('book')
    ...     .if_(author_id is not None)
    ...         .where('author_id', author_id)
    ...     .elif_(title)
    ...         .where('title', title, Operator.LIKE)
    ...     .else_()
    ...         .where('published_at', None, Operator.IS_NOT_NULL)
    ...     .endif()
    ...     .order_by('title'))

The builder keeps an explicit stack of ConditionalFrame entries, one per
open if_(). While the top frame is active the chain continues on the
builder itself; otherwise it continues on an InactiveBranch handle that
swallows every call until the branch changes or endif() closes it.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class ConditionalFrame:
    """State of one if_/elif_/else_/endif level.

    Attributes:
        state: Whether this level's own condition currently holds
        was_true: Whether any branch of this level has already fired
        parent_state: Whether the enclosing level is active
    """

    state: bool
    was_true: bool = False
    parent_state: bool = True

    def __post_init__(self):
        self.set_state(self.state)

    @property
    def active(self) -> bool:
        """Effective state: this branch holds and every enclosing one does."""
        return self.state and self.parent_state

    def set_state(self, cond: Any) -> None:
        self.state = bool(cond)
        self.was_true = self.was_true or self.state

    def elif_(self, cond: Any) -> None:
        self.set_state(not self.was_true and cond)

    def else_(self) -> None:
        self.set_state(not self.state and not self.was_true)


class InactiveBranch:
    """Stand-in returned for a builder while the current branch is inactive.

    Any attribute access yields a callable that ignores its arguments and
    returns the handle itself, so the chain keeps going without touching
    the builder. The branching methods are forwarded to the builder.
    """

    __slots__ = ('_builder',)

    def __init__(self, builder):
        self._builder = builder

    @property
    def builder(self):
        return self._builder

    def if_(self, cond: Any):
        return self._builder.if_(cond)

    def elif_(self, cond: Any):
        return self._builder.elif_(cond)

    def else_(self):
        return self._builder.else_()

    def endif(self):
        return self._builder.endif()

    def __getattr__(self, name: str):
        if name.startswith('__'):
            raise AttributeError(name)

        def swallow(*args, **kwargs):
            return self

        return swallow

    def __repr__(self) -> str:
        return f"<InactiveBranch of {self._builder.__class__.__name__}>"
