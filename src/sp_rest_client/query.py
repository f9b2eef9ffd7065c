"""
Query string accumulation and serialization.

QueryParameters is the ordered, key-unique mapping of query string
parameters a queryable builds up through its fluent calls. Serialization
also rewrites aliased parameters: a token of the form ``'!@label::value'``
embedded in the url body is replaced by ``@label`` and the literal is moved
into the query string as ``@label='value'``.
"""

from __future__ import annotations
import logging
import re
from typing import Dict, Iterator, List, Mapping, Optional, Union


logger = logging.getLogger(__name__)

ALIASED_PARAMETER = re.compile(r"'!(@.*?)::(.*?)'", re.IGNORECASE)


class QueryParameters:
    """Ordered query string parameters; later writes to a key replace earlier ones."""

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = {}
        if values:
            self.merge(values)

    def add(self, key: str, value: str) -> None:
        """Set ``key``, keeping its original position when it already exists."""
        self._values[key] = value

    def get(self, key: str) -> Optional[str]:
        """Return the value stored for ``key`` or None."""
        return self._values.get(key)

    def get_keys(self) -> List[str]:
        return list(self._values.keys())

    def get_values(self) -> List[str]:
        return list(self._values.values())

    def remove(self, key: str) -> Optional[str]:
        return self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()

    def merge(self, other: Union["QueryParameters", Mapping[str, str]]) -> None:
        """
        Copy every entry of ``other`` into this accumulator.

        Colliding keys are overwritten; ``other`` is left untouched.
        """
        for key, value in list(other.items()):
            self.add(key, value)

    def items(self):
        return self._values.items()

    def copy(self) -> "QueryParameters":
        return QueryParameters(self._values)

    @property
    def count(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QueryParameters):
            return list(self.items()) == list(other.items())
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"QueryParameters({self._values!r})"


def serialize_url_and_query(url: str, query: QueryParameters) -> str:
    """
    Build the full request url from a url body and accumulated parameters.

    Aliased parameters found in ``url`` are rewritten first; accumulated
    parameters are merged in afterwards and win on key collisions.

    Args:
        url: Url body, possibly containing aliased parameter tokens
        query: Accumulated query parameters (not modified)

    Returns:
        The url with its query string
    """
    aliased = QueryParameters()

    def _rewrite(match: "re.Match[str]") -> str:
        label, value = match.group(1), match.group(2)
        logger.debug(f"Rewriting aliased parameter from match {match.group(0)} to label: {label} value: {value}")
        aliased.add(label, f"'{value}'")
        return label

    url = ALIASED_PARAMETER.sub(_rewrite, url)

    aliased.merge(query)

    if aliased.count > 0:
        url += "?" + "&".join(f"{key}={value}" for key, value in aliased.items())

    return url
