"""Optional-value wrapper.

A ``Maybe`` is either a value, no value, or a captured exception. Deferred
instances run their computation once, on first inspection, and memoise the
outcome. Combinators never raise on their own; a captured exception only
surfaces when ``value`` is read.
"""

from typing import Any, Callable

from rhmm.errors import NoValueError

_UNSET = object()


class Maybe:
    __slots__ = ("_value", "_has_value", "_exception", "_computation")

    def __init__(self, value: Any = None, *, has_value: bool | None = None,
                 exception: BaseException | None = None,
                 computation: Callable[[], "Maybe"] | None = None):
        if has_value is None:
            has_value = value is not None and exception is None
        self._value = value if has_value else None
        self._has_value = has_value
        self._exception = exception
        self._computation = computation

    # --- construction ---

    @classmethod
    def of(cls, value: Any) -> "Maybe":
        """Wrap ``value``; ``None`` becomes no value."""
        return cls(value)

    @classmethod
    def no_value(cls) -> "Maybe":
        return cls(has_value=False)

    @classmethod
    def throw(cls, exception: BaseException) -> "Maybe":
        return cls(has_value=False, exception=exception)

    @classmethod
    def defer(cls, computation: Callable[[], Any]) -> "Maybe":
        """Lazily wrap the result of ``computation``.

        The computation may return a plain value or a Maybe. Exceptions it
        raises are captured.
        """
        def run():
            try:
                result = computation()
            except Exception as exc:
                return cls.throw(exc)
            return result if isinstance(result, Maybe) else cls.of(result)

        return cls(has_value=False, computation=run)

    def _resolve(self) -> None:
        if self._computation is None:
            return
        computation, self._computation = self._computation, None
        result = computation()
        result._resolve()
        self._value = result._value
        self._has_value = result._has_value
        self._exception = result._exception

    # --- queries ---

    @property
    def has_value(self) -> bool:
        self._resolve()
        return self._has_value

    @property
    def exception(self) -> BaseException | None:
        self._resolve()
        return self._exception

    @property
    def value(self) -> Any:
        self._resolve()
        if self._exception is not None:
            raise self._exception
        if not self._has_value:
            raise NoValueError("No value can be computed.")
        return self._value

    def value_or_default(self, default: Any = None) -> Any:
        """Return the value, or ``default`` when absent.

        ``default`` may be a zero-argument callable, evaluated only when
        needed. A captured exception is still raised.
        """
        self._resolve()
        if self._exception is not None:
            raise self._exception
        if self._has_value:
            return self._value
        return default() if callable(default) else default

    # --- combinators ---

    def or_else(self, other: Any) -> "Maybe":
        """Substitute ``other`` (a value, Maybe or callable) when absent."""
        if self.has_value or self.exception is not None:
            return self
        if callable(other):
            try:
                other = other()
            except Exception as exc:
                return Maybe.throw(exc)
        return other if isinstance(other, Maybe) else Maybe.of(other)

    def select(self, fn: Callable[[Any], Any]) -> "Maybe":
        """Map the value through ``fn``; exceptions raised by ``fn`` are captured."""
        if not self.has_value:
            return self
        try:
            return Maybe.of(fn(self._value))
        except Exception as exc:
            return Maybe.throw(exc)

    def bind(self, fn: Callable[[Any], "Maybe"]) -> "Maybe":
        if not self.has_value:
            return self
        try:
            return fn(self._value)
        except Exception as exc:
            return Maybe.throw(exc)

    def where(self, predicate: Callable[[Any], bool]) -> "Maybe":
        if not self.has_value:
            return self
        try:
            keep = predicate(self._value)
        except Exception as exc:
            return Maybe.throw(exc)
        return self if keep else Maybe.no_value()

    def unless(self, predicate: Callable[[Any], bool]) -> "Maybe":
        return self.where(lambda v: not predicate(v))

    def on_value(self, action: Callable[[Any], None]) -> "Maybe":
        if self.has_value:
            try:
                action(self._value)
            except Exception as exc:
                return Maybe.throw(exc)
        return self

    def on_no_value(self, action: Callable[[], None]) -> "Maybe":
        if not self.has_value and self.exception is None:
            try:
                action()
            except Exception as exc:
                return Maybe.throw(exc)
        return self

    def throw_on_no_value(self, exception: BaseException | Callable[[], BaseException]) -> "Maybe":
        if self.has_value or self.exception is not None:
            return self
        if callable(exception) and not isinstance(exception, BaseException):
            exception = exception()
        return Maybe.throw(exception)

    def suppress(self, predicate: Callable[[BaseException], bool] | None = None,
                 value: Any = _UNSET) -> "Maybe":
        """Drop a captured exception matching ``predicate``.

        The result is no value, or ``value`` when given.
        """
        exc = self.exception
        if exc is None:
            return self
        if predicate is not None:
            try:
                matched = predicate(exc)
            except Exception as predicate_exc:
                return Maybe.throw(predicate_exc)
            if not matched:
                return self
        return Maybe.no_value() if value is _UNSET else Maybe.of(value)

    def join(self, other: "Maybe", fn: Callable[[Any, Any], Any] | None = None) -> "Maybe":
        """Combine two values; absent if either is absent."""
        if not self.has_value:
            return self
        if not other.has_value:
            return other
        if fn is None:
            return Maybe.of((self._value, other._value))
        try:
            return Maybe.of(fn(self._value, other._value))
        except Exception as exc:
            return Maybe.throw(exc)

    def to_list(self) -> list:
        return [self._value] if self.has_value else []

    # --- dunder ---

    def __bool__(self) -> bool:
        return self.has_value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Maybe):
            return self.has_value and self._value == other
        if self.has_value != other.has_value:
            return False
        if self.has_value:
            return self._value == other._value
        return type(self.exception) is type(other.exception)

    def __hash__(self) -> int:
        if self.has_value:
            return hash(self._value)
        return hash((False, type(self.exception)))

    def __repr__(self) -> str:
        if self._computation is not None:
            return "Maybe(<deferred>)"
        if self._exception is not None:
            return f"Maybe.throw({self._exception!r})"
        if not self._has_value:
            return "Maybe.no_value()"
        return f"Maybe({self._value!r})"
