"""Pluralization used to infer partial paths from object references."""

from __future__ import annotations

from typing import Protocol

import inflection


class Inflector(Protocol):
    def pluralize(self, word: str) -> str: ...

    def singularize(self, word: str) -> str: ...


class EnglishInflector:
    """Rails-compatible English inflections backed by ``inflection``."""

    def pluralize(self, word: str) -> str:
        return inflection.pluralize(word)

    def singularize(self, word: str) -> str:
        return inflection.singularize(word)


DEFAULT_INFLECTOR: Inflector = EnglishInflector()


__all__ = ["DEFAULT_INFLECTOR", "EnglishInflector", "Inflector"]
