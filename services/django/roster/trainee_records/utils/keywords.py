"""
Keyword groups used to recognise roster headers.

Rosters come from different registration systems, in Arabic or English, so a
header only has to *contain* one of a role's keywords to be assigned that
role. Keywords are matched against lower-cased, trimmed header text.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

IDENTITY = "identity"
COURSE_CODE = "course_code"
COURSE_NAME = "course_name"
TRAINEE_NAME = "trainee_name"
PHONE = "phone"
MAJOR = "major"

REQUIRED_ROLES = (IDENTITY, COURSE_CODE)
OPTIONAL_ROLES = (COURSE_NAME, TRAINEE_NAME, PHONE, MAJOR)


DEFAULT_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    IDENTITY: (
        "رقم", "هوية", "سجل", "id", "no", "num", "student", "trainee", "المتدرب", "اكاديمي",
    ),
    COURSE_CODE: (
        "رمز", "كود", "code", "symbol", "course", "مقرر", "مادة", "المادة",
    ),
    COURSE_NAME: (
        "اسم المادة", "اسم المقرر", "name", "وصف", "desc", "title",
    ),
    TRAINEE_NAME: (
        "اسم المتدرب", "student name", "full name", "الاسم",
    ),
    PHONE: (
        "جوال", "هاتف", "mobile", "phone",
    ),
    MAJOR: (
        "تخصص", "major", "department",
    ),
}


def _normalize_keywords(words) -> Tuple[str, ...]:
    return tuple(str(word).strip().lower() for word in words if str(word).strip())


@dataclass(frozen=True)
class HeaderKeywords:
    """Keyword sets per semantic role; swap in a custom instance for other locales."""

    groups: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_KEYWORDS))

    def __post_init__(self):
        missing = [role for role in REQUIRED_ROLES if not self.groups.get(role)]
        if missing:
            raise ValueError(f"Keyword groups required for: {', '.join(missing)}")
        normalized = {role: _normalize_keywords(words) for role, words in self.groups.items()}
        object.__setattr__(self, "groups", normalized)

    def for_role(self, role: str) -> Tuple[str, ...]:
        return self.groups.get(role, ())

    def matches(self, role: str, text: str) -> bool:
        return any(keyword in text for keyword in self.for_role(role))

    def with_overrides(self, **groups) -> "HeaderKeywords":
        merged = dict(self.groups)
        merged.update(groups)
        return HeaderKeywords(groups=merged)
