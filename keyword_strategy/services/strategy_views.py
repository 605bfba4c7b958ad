"""
Strategy Views
==============
Derived views over an immutable StrategyResult: localized labels, badge
tones, difficulty bands, table filtering/sorting and the intent tree.

Every Level and SearchIntent member has an entry in the lookup tables
below; ``_lookup`` raises on a missing member instead of falling through.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, TypeVar

from keyword_strategy.app.schemas.strategy import (
    KeywordAnalysis,
    Level,
    SearchIntent,
    StrategyResult,
)
from keyword_strategy.app.schemas.views import (
    BadgeTone,
    DifficultyBand,
    KeywordRow,
    KeywordTableView,
    LevelBadge,
    MetricKind,
    SortDirection,
    TableFilters,
    TreeNode,
)

logger = logging.getLogger(__name__)

K = TypeVar("K")


# =============================================================================
# LABELS
# =============================================================================

LEVEL_LABELS: dict[Level, str] = {
    Level.HIGH: "زیاد",
    Level.MEDIUM: "متوسط",
    Level.LOW: "کم",
}

INTENT_LABELS: dict[SearchIntent, str] = {
    SearchIntent.INFORMATIONAL: "اطلاعاتی",
    SearchIntent.TRANSACTIONAL: "تراکنشی (خرید)",
    SearchIntent.COMMERCIAL: "تجاری",
    SearchIntent.NAVIGATIONAL: "ناوبری",
}

ROOT_SUBLABEL = "موضوع اصلی"
TRAFFIC_PREFIX = "ترافیک"
DEFAULT_CONTENT_FORMAT = "مقاله جامع (Blog Post)"
DEFAULT_TITLE_TEMPLATE = "بهترین راهنمای {keyword} - آموزش کامل"
SNIPPET_RATIONALE_CHARS = 150
SNIPPET_TEMPLATE = "{rationale}... در این مقاله یاد می\u200cگیرید که چگونه با استفاده از {keyword} به نتایج دلخواه برسید. کلیک کنید."

EASY_MAX_SCORE = 40
MODERATE_MAX_SCORE = 70

# Persian alphabet order; letters outside it sort after, by code point
_PERSIAN_ALPHABET = "آابپتثجچحخدذرزژسشصضطظعغفقکگلمنوهی"
_COLLATION: dict[str, int] = {ch: i for i, ch in enumerate(_PERSIAN_ALPHABET)}
# Arabic code points and hamza forms sort with their base letter
_LETTER_VARIANTS = {
    "ك": "ک",
    "ي": "ی",
    "ى": "ی",
    "ئ": "ی",
    "أ": "ا",
    "إ": "ا",
    "ء": "ا",
    "ؤ": "و",
    "ۀ": "ه",
    "ة": "ه",
}
_COLLATION.update({variant: _COLLATION[base] for variant, base in _LETTER_VARIANTS.items()})
# Zero-width non-joiner is ignorable
_IGNORABLE = frozenset("\u200c")


def _lookup(table: Mapping[K, str], key: K) -> str:
    try:
        return table[key]
    except KeyError:
        raise ValueError(f"No label defined for {key!r}") from None


def level_label(level: Level) -> str:
    """Localized label for a Level."""
    return _lookup(LEVEL_LABELS, level)


def intent_label(intent: SearchIntent) -> str:
    """Localized label for a SearchIntent."""
    return _lookup(INTENT_LABELS, intent)


# =============================================================================
# BADGES
# =============================================================================


def level_tone(level: Level, metric: MetricKind) -> BadgeTone:
    """
    How favorable ``level`` is for ``metric``.

    High volume and high commercial value are good; for competition, low is good.
    Medium is always neutral.
    """
    if level == Level.MEDIUM:
        return BadgeTone.NEUTRAL

    if metric == MetricKind.COMPETITION:
        favorable = Level.LOW
    elif metric in (MetricKind.VOLUME, MetricKind.COMMERCIAL):
        favorable = Level.HIGH
    else:
        raise ValueError(f"Unknown metric: {metric!r}")

    return BadgeTone.POSITIVE if level == favorable else BadgeTone.NEGATIVE


def level_badge(level: Level, metric: MetricKind) -> LevelBadge:
    return LevelBadge(level=level, label=level_label(level), tone=level_tone(level, metric))


def difficulty_band(score: int) -> DifficultyBand:
    """Bucket a 0-100 difficulty score."""
    if score > MODERATE_MAX_SCORE:
        return DifficultyBand.HARD
    if score > EASY_MAX_SCORE:
        return DifficultyBand.MODERATE
    return DifficultyBand.EASY


def display_title(item: KeywordAnalysis) -> str:
    """Suggested title, or a generic headline built from the keyword."""
    return item.suggested_title or DEFAULT_TITLE_TEMPLATE.format(keyword=item.keyword)


def display_format(item: KeywordAnalysis) -> str:
    """Content format, or the default long-form article label."""
    return item.content_format or DEFAULT_CONTENT_FORMAT


def serp_snippet(item: KeywordAnalysis) -> str:
    """Search result description: truncated rationale plus a call to action."""
    return SNIPPET_TEMPLATE.format(
        rationale=item.rationale[:SNIPPET_RATIONALE_CHARS],
        keyword=item.keyword,
    )


# =============================================================================
# FILTER / SORT
# =============================================================================


def filter_keywords(
    keywords: Iterable[KeywordAnalysis],
    competition: Level | None = None,
    volume: Level | None = None,
) -> list[KeywordAnalysis]:
    """Keep keywords matching both filters. ``None`` matches everything."""
    return [
        item for item in keywords
        if (competition is None or item.competition == competition)
        and (volume is None or item.search_volume == volume)
    ]


def persian_sort_key(text: str) -> tuple[tuple[int, int], ...]:
    """Collation key ordering Persian letters alphabetically, whitespace first."""
    return tuple(
        (-1, 0) if ch.isspace()
        else (0, _COLLATION[ch]) if ch in _COLLATION
        else (1, ord(ch))
        for ch in text.casefold()
        if ch not in _IGNORABLE
    )


def sort_keywords(
    keywords: Iterable[KeywordAnalysis],
    direction: SortDirection | None = None,
) -> list[KeywordAnalysis]:
    """Sort by keyword text. ``None`` keeps provider order."""
    items = list(keywords)
    if direction is None:
        return items
    return sorted(
        items,
        key=lambda item: persian_sort_key(item.keyword),
        reverse=direction == SortDirection.DESC,
    )


def next_sort_direction(current: SortDirection | None) -> SortDirection:
    """Cycle used by the keyword column header: none -> asc -> desc -> asc."""
    if current == SortDirection.ASC:
        return SortDirection.DESC
    return SortDirection.ASC


# =============================================================================
# TABLE
# =============================================================================


def build_keyword_row(item: KeywordAnalysis) -> KeywordRow:
    return KeywordRow(
        keyword=item.keyword,
        intent=item.intent,
        intent_label=intent_label(item.intent),
        search_volume=level_badge(item.search_volume, MetricKind.VOLUME),
        commercial_value=level_badge(item.commercial_value, MetricKind.COMMERCIAL),
        competition=level_badge(item.competition, MetricKind.COMPETITION),
        difficulty_index=item.difficulty_index,
        difficulty_band=difficulty_band(item.difficulty_index),
        rationale=item.rationale,
        display_title=display_title(item),
        display_format=display_format(item),
        serp_snippet=serp_snippet(item),
    )


def build_keyword_table(
    result: StrategyResult,
    filters: TableFilters | None = None,
) -> KeywordTableView:
    """
    Build the filtered, sorted keyword table for ``result``.

    Args:
        result: Generated strategy
        filters: Competition/volume filters and sort direction

    Returns:
        KeywordTableView
    """
    filters = filters or TableFilters()
    filtered = filter_keywords(result.keywords, filters.competition, filters.volume)
    ordered = sort_keywords(filtered, filters.sort)

    logger.debug(
        f"Keyword table: {len(ordered)}/{len(result.keywords)} rows "
        f"(competition={filters.competition}, volume={filters.volume}, sort={filters.sort})"
    )

    return KeywordTableView(
        topic=result.topic,
        summary=result.summary,
        filters=filters,
        rows=[build_keyword_row(item) for item in ordered],
        total=len(result.keywords),
        visible=len(ordered),
    )


# =============================================================================
# TREE
# =============================================================================


def group_by_intent(keywords: Iterable[KeywordAnalysis]) -> dict[SearchIntent, list[KeywordAnalysis]]:
    """Group keywords by intent, keeping first-appearance order of intents."""
    groups: dict[SearchIntent, list[KeywordAnalysis]] = {}
    for item in keywords:
        groups.setdefault(item.intent, []).append(item)
    return groups


def build_strategy_tree(result: StrategyResult) -> TreeNode:
    """Topic -> intent categories -> keywords (with traffic sub-label)."""
    categories = [
        TreeNode(
            name=intent_label(intent),
            value=str(len(items)),
            type="category",
            children=[
                TreeNode(
                    name=item.keyword,
                    value=f"{TRAFFIC_PREFIX}: {level_label(item.search_volume)}",
                    type="item",
                )
                for item in items
            ],
        )
        for intent, items in group_by_intent(result.keywords).items()
    ]

    return TreeNode(name=result.topic, value=ROOT_SUBLABEL, type="root", children=categories)


__all__ = [
    # Labels
    "LEVEL_LABELS",
    "INTENT_LABELS",
    "level_label",
    "intent_label",
    # Badges
    "level_tone",
    "level_badge",
    "difficulty_band",
    "display_title",
    "display_format",
    "serp_snippet",
    # Filter / sort
    "filter_keywords",
    "persian_sort_key",
    "sort_keywords",
    "next_sort_direction",
    # Table / tree
    "build_keyword_row",
    "build_keyword_table",
    "group_by_intent",
    "build_strategy_tree",
]
