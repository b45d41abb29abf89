"""Topic classification.

Maps a topic to a generation strategy by scanning for category keywords.
Rules are evaluated in a fixed priority order and the first matching
category wins:

    historical -> scientific -> social -> fantasy -> general

Keywords match as whole words or phrases, so "ai" matches "AI thay thế
giáo viên" but not "tai nạn".
"""

import re
import unicodedata

from scenario_engine.entities import GenerationStrategy

KEYWORD_RULES: tuple[tuple[GenerationStrategy, tuple[str, ...]], ...] = (
    (
        GenerationStrategy.HISTORICAL,
        (
            "lịch sử", "thế chiến", "chiến tranh", "cách mạng", "triều đại",
            "đế chế", "đế quốc", "nhà nguyễn", "nhà trần", "cổ đại",
            "history", "historical", "war", "wars", "world war", "dynasty",
            "empire", "revolution", "ancient", "medieval",
        ),
    ),
    (
        GenerationStrategy.SCIENTIFIC,
        (
            "khoa học", "công nghệ", "trí tuệ nhân tạo", "robot", "ai",
            "vũ trụ", "phát minh", "internet", "máy tính", "gen",
            "science", "scientific", "technology", "innovation", "discovery",
            "invention", "space", "computer", "artificial intelligence",
        ),
    ),
    (
        GenerationStrategy.SOCIAL,
        (
            "xã hội", "văn hóa", "giáo dục", "chính trị", "kinh tế",
            "gia đình", "trường học",
            "social", "culture", "society", "education", "politics",
            "economy", "school", "family",
        ),
    ),
    (
        GenerationStrategy.FANTASY,
        (
            "phép thuật", "rồng", "thần tiên", "siêu năng lực", "phù thủy",
            "yêu tinh", "kỳ lân",
            "magic", "dragon", "dragons", "fantasy", "supernatural",
            "wizard", "unicorn", "superpower", "superpowers",
        ),
    ),
)


def _compile(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)")


_COMPILED_RULES = tuple((strategy, _compile(keywords)) for strategy, keywords in KEYWORD_RULES)


def classify(topic: str) -> GenerationStrategy:
    """Select the generation strategy for a topic.

    Args:
        topic: The user-supplied topic

    Returns:
        The first strategy whose keywords occur in the lower-cased topic,
        or ``GenerationStrategy.GENERAL``
    """
    text = unicodedata.normalize("NFC", topic).lower()
    for strategy, pattern in _COMPILED_RULES:
        if pattern.search(text):
            return strategy
    return GenerationStrategy.GENERAL
