"""
Label validation and premium classification.

Labels are validated for shape only: non-empty parts, length limits and
at most one dot (one-level subdomain notation ``child.parent``). The
character set (lowercase ascii, digits, hyphen) is enforced by the
presentation layer before a label ever reaches the registrar.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from .exceptions import EmptyLabel, InvalidLabel, LabelTooLong


@dataclass(frozen=True)
class TopLevel:
    """A label registered directly under the top-level suffix."""

    label: str

    @property
    def key(self) -> str:
        return self.label

    def full_name(self, tld: str) -> str:
        return f"{self.label}.{tld}"


@dataclass(frozen=True)
class Subdomain:
    """A one-level subdomain ``child.parent`` chained to an existing parent label."""

    parent: str
    child: str

    @property
    def key(self) -> str:
        return f"{self.child}.{self.parent}"

    def full_name(self, tld: str) -> str:
        return f"{self.child}.{self.parent}.{tld}"


ParsedLabel = TopLevel | Subdomain


def _check_part(part: str, max_length: int) -> None:
    if not part:
        raise EmptyLabel()
    if len(part) > max_length:
        raise LabelTooLong(f"{len(part)} > {max_length}")


def parse_label(
    raw: str,
    tld: str,
    max_length: int = 32,
    max_full_name_length: int = 64,
) -> ParsedLabel:
    """
    Parse and validate a requested label.

    Args:
        raw: Label as submitted, without the top-level suffix
        tld: Top-level suffix used to render the full name
        max_length: Limit for each dot-separated part, in code points
        max_full_name_length: Limit for the rendered full name

    Returns:
        TopLevel or Subdomain

    Raises:
        EmptyLabel: Label is empty
        LabelTooLong: A part or the rendered full name is too long
        InvalidLabel: Leading/trailing dot or more than one level
    """
    if not raw:
        raise EmptyLabel()

    dots = raw.count(".")
    if dots == 0:
        _check_part(raw, max_length)
        parsed: ParsedLabel = TopLevel(raw)
    elif dots == 1:
        child, parent = raw.split(".", 1)
        if not child or not parent:
            raise InvalidLabel(f"malformed subdomain: {raw!r}")
        _check_part(parent, max_length)
        _check_part(child, max_length)
        parsed = Subdomain(parent=parent, child=child)
    else:
        raise InvalidLabel(f"only one subdomain level is supported: {raw!r}")

    full_name = parsed.full_name(tld)
    if len(full_name) > max_full_name_length:
        raise LabelTooLong(f"full name {full_name!r} exceeds {max_full_name_length}")
    return parsed


class PremiumClassifier:
    """
    Decides whether a label is priced as premium.

    An admin override wins; otherwise labels no longer than the threshold
    are premium. Subdomains are measured on the whole ``child.parent`` key.
    """

    def __init__(self, threshold: int, overrides: Mapping[str, bool]) -> None:
        self._threshold = threshold
        self._overrides = overrides

    def is_premium(self, label: str) -> bool:
        override = self._overrides.get(label)
        if override is not None:
            return override
        return len(label) <= self._threshold
