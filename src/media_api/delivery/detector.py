"""Signature scan for traversal and home-directory escapes."""
import re
from collections.abc import Iterable
from dataclasses import dataclass

from media_api.delivery.errors import InvalidPathError


@dataclass(frozen=True)
class Signature:
    """A named pattern whose presence in any path form rejects the request.

    Attributes:
        name: Identifier written to logs when the signature matches.
        pattern: Compiled case-insensitive expression.
    """

    name: str
    pattern: re.Pattern[str]

    def matches(self, value: str) -> bool:
        """Check whether the signature occurs anywhere in the value."""
        return self.pattern.search(value) is not None


def _sig(name: str, expression: str) -> Signature:
    return Signature(name, re.compile(expression, re.IGNORECASE))


SIGNATURES: tuple[Signature, ...] = (
    _sig("parent_reference", r"\.\."),
    _sig("home_reference", r"~"),
    _sig("null_byte", r"\x00"),
    _sig("encoded_null_byte", r"%00"),
    _sig("backslash", r"\\"),
    _sig("reserved_character", r'[<>:"|?*]'),
    # Fragments that still spell traversal after one decode pass.
    _sig("encoded_parent_reference", r"%2e%2e|%2e\.|\.%2e"),
    _sig("double_encoded_dot", r"%252e"),
    _sig("encoded_backslash", r"%5c|%255c"),
    _sig("encoded_separator_parent", r"%2f%2e%2e"),
)


def find_signature(
    forms: Iterable[str],
    signatures: tuple[Signature, ...] = SIGNATURES,
) -> Signature | None:
    """Return the first signature found in any of the forms.

    Args:
        forms: Path representations to scan.
        signatures: Signature table to apply.

    Returns:
        The matching signature, or None when every form is clean.
    """
    for form in forms:
        for signature in signatures:
            if signature.matches(form):
                return signature
    return None


def scan(
    forms: Iterable[str],
    signatures: tuple[Signature, ...] = SIGNATURES,
) -> None:
    """Reject the request if any form carries a traversal signature.

    Args:
        forms: Path representations produced by the normalizer.
        signatures: Signature table to apply.

    Raises:
        InvalidPathError: On the first matching signature.
    """
    forms = list(forms)
    signature = find_signature(forms, signatures)
    if signature is not None:
        raise InvalidPathError(signature.name, forms[0] if forms else "")
