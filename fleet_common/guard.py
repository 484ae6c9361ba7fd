"""Guard assertions for arguments and internal state.

``assert_arg_*`` checks blame the caller and raise ``InvalidArgumentException``.
``assert_is_*`` checks guard internal state and raise ``CriticalException``,
or ``MinorException`` when ``is_critical`` is False.
"""
from __future__ import annotations

import re
from typing import Any

from fleet_common.errors.exceptions import (
    CriticalException,
    InvalidArgumentException,
    MinorException,
)


class Guard:

    @staticmethod
    def assert_arg_defined(name: str, target: Any, message: str | None = None) -> None:
        """Makes sure ``target`` is not None.

        Raises:
            InvalidArgumentException: If assertion fails.
        """
        if target is None:
            raise InvalidArgumentException(name, message or "Must not be null or undefined!")

    @staticmethod
    def assert_arg_function(name: str, target: Any, message: str | None = None) -> None:
        """Makes sure ``target`` is callable.

        Raises:
            InvalidArgumentException: If assertion fails.
        """
        if not callable(target):
            raise InvalidArgumentException(name, message or "Must be a function!")

    @staticmethod
    def assert_arg_match(name: str, rule: str | re.Pattern, target: str, message: str | None = None) -> None:
        """Makes sure ``target`` matches the regular expression ``rule``.

        Raises:
            InvalidArgumentException: If assertion fails.
        """
        if not isinstance(target, str) or not re.search(rule, target):
            raise InvalidArgumentException(name, message or "Does not match specified rule!")

    @staticmethod
    def assert_is_defined(target: Any, message: str = "", is_critical: bool = True) -> None:
        """Makes sure ``target`` is not None."""
        Guard.assert_is_falsey(target is None, message, is_critical)

    @staticmethod
    def assert_is_function(target: Any, message: str = "", is_critical: bool = True) -> None:
        """Makes sure ``target`` is callable."""
        Guard.assert_is_truthy(callable(target), message, is_critical)

    @staticmethod
    def assert_is_match(rule: str | re.Pattern, target: str, message: str = "", is_critical: bool = True) -> None:
        """Makes sure ``target`` matches the regular expression ``rule``."""
        Guard.assert_is_truthy(isinstance(target, str) and re.search(rule, target), message, is_critical)

    @staticmethod
    def assert_is_truthy(target: Any, message: str = "", is_critical: bool = True) -> None:
        """Makes sure ``target`` is truthy.

        Raises:
            CriticalException: If assertion fails and ``is_critical`` is True.
            MinorException: If assertion fails and ``is_critical`` is False.
        """
        if not target:
            if is_critical:
                raise CriticalException(message)
            raise MinorException(message)

    @staticmethod
    def assert_is_falsey(target: Any, message: str = "", is_critical: bool = True) -> None:
        """Makes sure ``target`` is falsey.

        Raises:
            CriticalException: If assertion fails and ``is_critical`` is True.
            MinorException: If assertion fails and ``is_critical`` is False.
        """
        if target:
            if is_critical:
                raise CriticalException(message)
            raise MinorException(message)
