"""
Naming Service: Type-Name Inflection and Key Mapping

The filter engine never assumes how stored keys are spelled. It asks a
naming service to:
- pluralize a type name ("article" -> "articles")
- map a predicate key to the stored attribute key ("firstName" -> "first-name")
- map a predicate key to the stored relationship key

`InflectionNaming` is the default and follows the JSON:API convention of
plural type names and dasherized member names, using the `inflection`
package (a port of the Rails inflector).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import inflection

from localstore.core import constants as C


@runtime_checkable
class NamingService(Protocol):
    """Contract consumed by the query filter engine."""

    def pluralize(self, name: str) -> str: ...

    def singularize(self, name: str) -> str: ...

    def key_for_attribute(self, name: str) -> str: ...

    def key_for_relationship(self, name: str) -> str: ...


class InflectionNaming:
    """
    JSON:API naming: plural types, dasherized attribute and relationship keys.

    Namespaced type names ("admin/post") are inflected on their last
    segment only.

    Usage:
        naming = InflectionNaming()
        naming.pluralize("admin/post")        # "admin/posts"
        naming.key_for_attribute("createdAt")  # "created-at"
    """

    __slots__ = ("_dasherize",)

    def __init__(self, dasherize_keys: bool = True) -> None:
        """
        Args:
            dasherize_keys: When False, attribute and relationship keys
                are looked up exactly as written in the predicate.
        """
        self._dasherize = dasherize_keys

    def pluralize(self, name: str) -> str:
        head, sep, tail = name.rpartition(C.URL_SEPARATOR)
        return f"{head}{sep}{inflection.pluralize(tail)}"

    def singularize(self, name: str) -> str:
        head, sep, tail = name.rpartition(C.URL_SEPARATOR)
        return f"{head}{sep}{inflection.singularize(tail)}"

    def key_for_attribute(self, name: str) -> str:
        if not self._dasherize:
            return name
        return inflection.dasherize(inflection.underscore(name))

    def key_for_relationship(self, name: str) -> str:
        return self.key_for_attribute(name)

    def __repr__(self) -> str:
        return f"InflectionNaming(dasherize_keys={self._dasherize})"
