"""Allow-list of identities exempt from automated-author detection."""

from typing import Iterable

from shaperelay.bus.events import Author


class AllowList:
    """
    Static set of exempt identifiers.

    An identifier may be an author id, a username or a display name. The
    set is fixed at startup and never mutated.
    """

    def __init__(self, identifiers: Iterable[str] = ()):
        self._identifiers = frozenset(i for i in identifiers if i)

    def allows(self, *identifiers: str | None) -> bool:
        """Check whether any of the given identifiers is allow-listed."""
        return any(i in self._identifiers for i in identifiers if i)

    def allows_author(self, author: Author) -> bool:
        return self.allows(author.id, author.name, author.display_name)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._identifiers

    def __iter__(self):
        return iter(sorted(self._identifiers))

    def __len__(self) -> int:
        return len(self._identifiers)
