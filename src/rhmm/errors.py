"""Exception types raised by RHMM."""


class RHMMError(Exception):
    """Base class for all RHMM errors."""


class InvalidArgument(RHMMError, ValueError):
    """A constructor or operation received an unusable argument."""


class NoSourceStates(RHMMError, LookupError):
    """No prior states are available to extend a path from."""


class NoValueError(RHMMError, LookupError):
    """An absent optional value was dereferenced."""


class ModelFunctionFailure(RHMMError, RuntimeError):
    """A user-supplied model function raised or returned an unusable value.

    The originating exception, if any, is chained as ``__cause__``.
    """

    def __init__(self, function_name: str, args: tuple, reason: str):
        self.function_name = function_name
        self.arguments = args
        self.reason = reason
        rendered = ", ".join(repr(a) for a in args)
        super().__init__(f"{function_name}({rendered}) failed: {reason}")
