"""
Category attachment policy.

A category whose name or slug contains "audio" (checked first) or "video" is
media-affine: a publication filed under it must lead with a file of that media
family. Evaluation is pure and never touches the database.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from mediahub.core.exceptions import PolicyViolationError

AUDIO = "audio"
VIDEO = "video"

RULE_EMPTY = "empty"
RULE_FIRST_ATTACHMENT = "first_attachment"
RULE_NO_MATCH = "no_match"


@dataclass(frozen=True)
class PolicyOk:
    family: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class PolicyViolation:
    reason: str
    rule: str
    family: str

    @property
    def ok(self) -> bool:
        return False

    def to_error(self) -> PolicyViolationError:
        return PolicyViolationError(self.reason, rule=self.rule)


PolicyResult = Union[PolicyOk, PolicyViolation]


def media_affinity(category) -> Optional[str]:
    """Return "audio", "video" or None for a category-like object."""
    haystack = f"{category.name or ''} {category.slug or ''}".lower()
    if AUDIO in haystack:
        return AUDIO
    if VIDEO in haystack:
        return VIDEO
    return None


def _mime_type(attachment) -> str:
    if isinstance(attachment, str):
        return attachment.lower()
    return (getattr(attachment, "mime_type", None) or "").lower()


def evaluate(category, attachments: Sequence) -> PolicyResult:
    """
    Check an ordered attachment list against the category's media affinity.

    Args:
        category: Object with ``name`` and ``slug``
        attachments: Files (anything with ``mime_type``) or MIME strings, in
            display order

    Returns:
        PolicyOk, or PolicyViolation naming the failed rule
    """
    family = media_affinity(category)
    if family is None:
        return PolicyOk()

    prefix = f"{family}/"
    mime_types = [_mime_type(a) for a in attachments]

    if not mime_types:
        return PolicyViolation(
            reason=f"At least one {family} attachment is required for {family} category publications",
            rule=RULE_EMPTY,
            family=family,
        )
    if not mime_types[0].startswith(prefix):
        return PolicyViolation(
            reason=f"The first attachment must be a {family} file for {family} category publications",
            rule=RULE_FIRST_ATTACHMENT,
            family=family,
        )
    # Implied by the first-attachment rule.
    if not any(m.startswith(prefix) for m in mime_types):
        return PolicyViolation(
            reason=f"At least one {family} attachment is required for {family} category publications",
            rule=RULE_NO_MATCH,
            family=family,
        )
    return PolicyOk(family=family)


def enforce(category, attachments: Sequence) -> PolicyOk:
    """Like ``evaluate`` but raises PolicyViolationError on a violation."""
    result = evaluate(category, attachments)
    if isinstance(result, PolicyViolation):
        raise result.to_error()
    return result
