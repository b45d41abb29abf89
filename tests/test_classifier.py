"""Tests for topic classification."""

import pytest

from scenario_engine.entities import GenerationStrategy
from scenario_engine.services.classifier import classify


@pytest.mark.parametrize(
    ("topic", "expected"),
    [
        ("Nếu như Việt Nam thắng trong chiến tranh khác đi", GenerationStrategy.HISTORICAL),
        ("What if the Roman Empire never fell", GenerationStrategy.HISTORICAL),
        ("Nếu như trí tuệ nhân tạo viết sách giáo khoa", GenerationStrategy.SCIENTIFIC),
        ("Nếu như robot thông minh hơn con người", GenerationStrategy.SCIENTIFIC),
        ("Nếu như AI thay thế giáo viên", GenerationStrategy.SCIENTIFIC),
        ("Nếu như giáo dục miễn phí hoàn toàn", GenerationStrategy.SOCIAL),
        ("What if every family lived together", GenerationStrategy.SOCIAL),
        ("Nếu như rồng có thật", GenerationStrategy.FANTASY),
        ("What if magic was real", GenerationStrategy.FANTASY),
        ("Nếu như con người có thể bay", GenerationStrategy.GENERAL),
    ],
)
def test_classify(topic, expected):
    assert classify(topic) == expected


def test_classify_is_deterministic():
    topic = "Nếu như mọi người đều có siêu năng lực"
    assert classify(topic) == classify(topic) == GenerationStrategy.FANTASY


def test_priority_order_breaks_ties():
    # historical beats scientific, scientific beats social, social beats fantasy
    assert classify("Nếu như robot xuất hiện trong thế chiến thứ hai") == GenerationStrategy.HISTORICAL
    assert classify("Nếu như robot dạy ở trường học") == GenerationStrategy.SCIENTIFIC
    assert classify("Nếu như phép thuật được dạy ở trường học") == GenerationStrategy.SOCIAL


def test_keywords_match_case_insensitively():
    assert classify("NẾU NHƯ ROBOT CAI TRỊ") == GenerationStrategy.SCIENTIFIC


def test_short_keywords_need_word_boundaries():
    assert classify("Nếu như tai nạn không bao giờ xảy ra") == GenerationStrategy.GENERAL
    assert classify("What if software was free") == GenerationStrategy.GENERAL


def test_unmatched_topic_is_general():
    assert classify("") == GenerationStrategy.GENERAL


@pytest.mark.parametrize(
    "topic",
    ["What if warfare never existed", "What if aircraft could not fly", "Nếu như genz lãnh đạo"],
)
def test_keyword_inside_longer_word_does_not_match(topic):
    # "war", "ai" and "gen" appear only as part of longer words here
    assert classify(topic) == GenerationStrategy.GENERAL
