"""
Unit of Work Pattern

Manages database transactions and makes sure side effects registered
during a unit of work (notifications) run only after a successful commit.
"""

from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, List
import logging
import sys

from django.db import transaction

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """
    Abstract Unit of Work

    Subclasses provide the transaction boundary (begin/end) and decide how
    post-commit callbacks are scheduled. Callback failures are logged and
    never propagate: the data is already committed at that point.
    """

    def __init__(self):
        self._callbacks: List[Callable[[], None]] = []

    def __enter__(self):
        self.begin()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self.end(exc_type, exc_val, exc_tb)

    @abstractmethod
    def begin(self):
        """Open the transaction and take any locks"""

    @abstractmethod
    def end(self, exc_type, exc_val, exc_tb):
        """Close the transaction opened by begin()"""

    @abstractmethod
    def schedule(self, func: Callable[[], None]):
        """Arrange for func to run once the transaction has committed"""

    def on_commit(self, func: Callable, *args, **kwargs):
        """Register a side effect to run after commit"""
        self._callbacks.append(partial(func, *args, **kwargs))

    def commit(self):
        logger.debug(f"Committing unit of work with {len(self._callbacks)} post-commit callbacks")

        callbacks = self._callbacks.copy()
        self._callbacks.clear()

        if callbacks:
            self.schedule(lambda: self._run_callbacks(callbacks))

    def rollback(self):
        logger.warning(f"Rolling back unit of work, discarding {len(self._callbacks)} callbacks")
        self._callbacks.clear()

    def _run_callbacks(self, callbacks: List[Callable[[], None]]):
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Post-commit callback failed: {e}", exc_info=True)


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Wraps transaction.atomic() and, when a lock callable is given, runs it
    right after the transaction opens (typically a SELECT ... FOR UPDATE on
    the row that guards a set of records).

    Usage:
        with DjangoUnitOfWork(lock=lambda: lock_product(product_id)) as uow:
            reservation = store.find_by_id(reservation_id)
            ...
            store.save(reservation)
            uow.on_commit(notifier.notify_confirmed, reservation)
        # Callbacks run after commit
    """

    def __init__(self, lock: Callable[[], None] | None = None, using: str | None = None):
        super().__init__()
        self._lock = lock
        self._using = using
        self._transaction = None

    def begin(self):
        self._transaction = transaction.atomic(using=self._using)
        self._transaction.__enter__()
        if self._lock is not None:
            try:
                self._lock()
            except BaseException:
                self._transaction.__exit__(*sys.exc_info())
                self._transaction = None
                raise

    def end(self, exc_type, exc_val, exc_tb):
        if self._transaction:
            self._transaction.__exit__(exc_type, exc_val, exc_tb)
            self._transaction = None

    def schedule(self, func: Callable[[], None]):
        """
        Callbacks go through transaction.on_commit(), so they run only if
        the outermost transaction commits.
        """
        transaction.on_commit(func, using=self._using)
