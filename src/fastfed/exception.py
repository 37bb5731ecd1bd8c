from typing import Iterable
from typing import List
from typing import Optional


class FastFedError(Exception):
    pass


class ConfigurationError(FastFedError):
    pass


class InvalidChange(FastFedError):
    pass


class FastFedSecurityError(FastFedError):
    pass


class ProfileDefect(FastFedError):
    """A profile claims support for an extension point but can not produce the extension."""
    pass


class IncompatibleProviders(FastFedError):
    def __init__(self, message: str, urn: Optional[str] = None, side: Optional[str] = None):
        FastFedError.__init__(self, message)
        self.urn = urn
        self.side = side


class ErrorAccumulator(object):
    """Collects validation failures so that all of them can be reported at once."""

    def __init__(self):
        self._errors = []

    def add(self, error: str):
        self._errors.append(error)

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def clear(self):
        self._errors = []

    def __len__(self):
        return len(self._errors)

    def __iter__(self):
        return iter(self._errors)

    def __str__(self):
        return "\n".join(self._errors)


class InvalidMetadata(FastFedError):
    def __init__(self, errors: Iterable[str], tree: Optional[dict] = None):
        self.errors = list(errors)
        self.tree = tree
        FastFedError.__init__(self,
                              "Metadata is malformed or non-compliant:\n" + "\n".join(self.errors))
