import logging
import re
from types import MappingProxyType
from typing import Container, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 6
MIN_PART_LENGTH = 2

# Applied in this order; later keys see the output of earlier rules.
DEFAULT_REPLACEMENT_RULES: Mapping[str, str] = MappingProxyType({
    "Sch": "S",
    "sch": "s",
    "Ä": "Ae",
    "Ö": "Oe",
    "Ü": "Ue",
    "ä": "ae",
    "ö": "oe",
    "ü": "ue",
    "ß": "ss",
})

INVALID_CHARS = re.compile(r"[^A-Za-z0-9]")


class UsernameGenerationError(ValueError):
    kind = "error"


class InvalidArgumentError(UsernameGenerationError):
    kind = "invalid_argument"


class InvalidRangeError(UsernameGenerationError):
    kind = "invalid_range"


class ExhaustedError(UsernameGenerationError):
    kind = "exhausted"


def take_first_n_characters(value: str, n: int) -> str:
    return value if len(value) <= n else value[:n]


class UsernameGenerator:
    """Builds unique usernames from a first and last name.

    The replacement table is copied once at construction and never changes
    afterwards, so one instance can be shared between callers. The set of
    existing usernames belongs to the caller and is only read.
    """

    def __init__(self, replacement_rules: Optional[Mapping[str, str]] = None) -> None:
        rules = DEFAULT_REPLACEMENT_RULES if replacement_rules is None else replacement_rules
        self._rules: Mapping[str, str] = MappingProxyType(dict(rules))
        self._invalid_chars = INVALID_CHARS

    @property
    def replacement_rules(self) -> Mapping[str, str]:
        return self._rules

    def normalize(self, name: Optional[str]) -> str:
        """Apply the replacement rules in order, then drop non-alphanumerics."""
        if not name:
            return ""
        for key, value in self._rules.items():
            name = name.replace(key, value)
        return self._invalid_chars.sub("", name)

    def build_base_username(
        self,
        first_name: str,
        last_name: str,
        total_length: int,
        suffix: str = "",
        reverse_order: bool = False,
    ) -> str:
        first = self.normalize(first_name)
        last = self.normalize(last_name)
        half_length = total_length // 2
        part1 = take_first_n_characters(last if reverse_order else first, max(half_length, MIN_PART_LENGTH))
        part2 = take_first_n_characters(first if reverse_order else last, total_length - len(part1))
        # No padding: short names give a username shorter than total_length.
        return part1 + part2 + suffix

    def iter_candidates(
        self, first_name: str, last_name: str, min_length: int, max_length: int
    ) -> Iterator[str]:
        """Yield candidates in search order.

        Normal order before reversed; within an order, each length from
        ``min_length`` to ``max_length`` yields its base candidate followed
        by the zero-padded numeric suffixes for that length.
        """
        _validate(first_name, last_name, min_length, max_length)
        return self._candidates(first_name, last_name, min_length, max_length)

    def _candidates(
        self, first_name: str, last_name: str, min_length: int, max_length: int
    ) -> Iterator[str]:
        for reverse_order in (False, True):
            for length in range(min_length, max_length + 1):
                yield self.build_base_username(first_name, last_name, length, "", reverse_order)
                digits, highest = _suffix_bounds(length)
                for suffix_num in range(1, highest + 1):
                    suffix = str(suffix_num).zfill(digits)
                    available_length = length - len(suffix)
                    if available_length < MIN_PART_LENGTH:
                        continue
                    yield self.build_base_username(first_name, last_name, available_length, suffix, reverse_order)

    def generate_unique_username(
        self,
        first_name: str,
        last_name: str,
        min_length: int,
        max_length: int,
        existing_usernames: Container[str],
    ) -> str:
        """Return the first candidate not present in ``existing_usernames``.

        Raises InvalidArgumentError for blank names, InvalidRangeError for a
        bad length range and ExhaustedError when every candidate is taken.
        """
        for candidate in self.iter_candidates(first_name, last_name, min_length, max_length):
            if candidate not in existing_usernames:
                logger.debug("generated username %s for %r %r", candidate, first_name, last_name)
                return candidate
        logger.warning(
            "no unique username for %r %r in length range %d-%d",
            first_name, last_name, min_length, max_length,
        )
        raise ExhaustedError("no unique username available in range")


def _suffix_bounds(length: int) -> Tuple[int, int]:
    digits = max(1, length // 3)
    return digits, 10 ** digits - 1


def _validate(first_name: str, last_name: str, min_length: int, max_length: int) -> None:
    if not first_name or not first_name.strip():
        raise InvalidArgumentError("first name empty")
    if not last_name or not last_name.strip():
        raise InvalidArgumentError("last name empty")
    if min_length < MIN_USERNAME_LENGTH:
        raise InvalidRangeError("minLength below floor")
    if max_length < min_length:
        raise InvalidRangeError("maxLength below minLength")
