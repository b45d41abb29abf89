"""Tests for static fallback content."""

import pytest

from scenario_engine.services import StaticFallback
from scenario_engine.services.fallback import DEFAULT_TEMPLATES, FALLBACK_MODEL, FALLBACK_PROVIDER


def test_render_strips_leading_what_if():
    text = StaticFallback().render("Nếu như con người có thể bay")

    assert text.startswith("Nếu như con người có thể bay,")
    assert "Nếu như nếu như" not in text


def test_render_strips_english_what_if():
    text = StaticFallback().render("What if cats could talk?")

    assert text.startswith("Nếu như cats could talk,")


def test_render_is_deterministic_per_topic():
    fallback = StaticFallback()
    topic = "Nếu như thời gian có thể dừng lại"

    assert fallback.render(topic) == fallback.render(f"  {topic.upper()} ".lower())


def test_render_uses_one_of_the_templates():
    text = StaticFallback().render("Nếu như Internet không tồn tại")
    prefixes = [template.split("{premise}")[1][:20] for template in DEFAULT_TEMPLATES]

    assert any(prefix in text for prefix in prefixes)


def test_respond_looks_like_provider_output():
    response = StaticFallback().respond("Nếu như con người có thể bay")

    assert response.provider_name == FALLBACK_PROVIDER
    assert response.model_name == FALLBACK_MODEL
    assert response.token_usage.total == 0
    assert response.content


def test_requires_templates():
    with pytest.raises(ValueError):
        StaticFallback(templates=())
