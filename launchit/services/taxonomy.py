"""Category taxonomy offered by the submission form."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from launchit.schemas.submission import CategoryGroup, CategoryOption

EMERGING_GROUP_LABEL = "Emerging Technologies"
AI_DETECTED_GROUP_LABEL = "AI-Detected Categories"

_DEFAULT_GROUPS = (
    (
        "Software & SaaS",
        (
            ("saas", "SaaS"),
            ("developer-tools", "Developer Tools"),
            ("productivity", "Productivity"),
            ("no-code", "No-Code"),
            ("open-source", "Open Source"),
        ),
    ),
    (
        "Artificial Intelligence",
        (
            ("ai", "Artificial Intelligence"),
            ("machine-learning", "Machine Learning"),
            ("generative-ai", "Generative AI"),
            ("ai-agents", "AI Agents"),
        ),
    ),
    (
        "Finance & Commerce",
        (
            ("fintech", "FinTech"),
            ("ecommerce", "E-Commerce"),
            ("marketplace", "Marketplace"),
            ("payments", "Payments"),
        ),
    ),
    (
        "Consumer",
        (
            ("social", "Social Media"),
            ("education", "EdTech"),
            ("health", "HealthTech"),
            ("gaming", "Gaming"),
            ("travel", "Travel"),
        ),
    ),
    (
        "Business",
        (
            ("marketing", "Marketing"),
            ("sales", "Sales"),
            ("hr", "HR & Recruiting"),
            ("analytics", "Analytics"),
        ),
    ),
    (
        EMERGING_GROUP_LABEL,
        (
            ("web3", "Web3 & Blockchain"),
            ("climate", "Climate Tech"),
            ("robotics", "Robotics"),
            ("ar-vr", "AR / VR"),
        ),
    ),
)


def default_groups() -> List[CategoryGroup]:
    """Fresh copy of the built-in taxonomy; callers may mutate it."""

    return [
        CategoryGroup(
            label=label,
            options=[CategoryOption(value=value, label=text) for value, text in options],
        )
        for label, options in _DEFAULT_GROUPS
    ]


class Taxonomy:
    """Per-session category list, extended when AI detects a new category."""

    def __init__(self, groups: Optional[Iterable[CategoryGroup]] = None) -> None:
        self.groups: List[CategoryGroup] = (
            [group.model_copy(deep=True) for group in groups]
            if groups is not None
            else default_groups()
        )

    def options(self) -> List[CategoryOption]:
        return [option for group in self.groups for option in group.options]

    def find_by_value(self, value: Optional[str]) -> Optional[CategoryOption]:
        if not value:
            return None
        for option in self.options():
            if option.value == value:
                return option
        return None

    def match(self, detected: str) -> Optional[CategoryOption]:
        """Exact value match, then case-insensitive label substring match."""

        needle = detected.strip().lower()
        if not needle:
            return None
        options = self.options()
        for option in options:
            if option.value in (detected, needle) or option.label.lower() == needle:
                return option
        for option in options:
            if needle in option.label.lower():
                return option
        return None

    def resolve_detected(self, detected: str) -> CategoryOption:
        """Return an existing option for ``detected`` or register a new one."""

        existing = self.match(detected)
        if existing is not None:
            return existing

        option = CategoryOption(
            value=re.sub(r"\s+", "-", detected.lower()),
            label=detected,
            is_new=True,
        )
        for group in self.groups:
            if group.label == EMERGING_GROUP_LABEL:
                group.options.append(option)
                break
        else:
            self.groups.append(CategoryGroup(label=AI_DETECTED_GROUP_LABEL, options=[option]))
        return option
