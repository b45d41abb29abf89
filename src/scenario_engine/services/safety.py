"""Content safety checks and post-processing of generated text."""

import re
import unicodedata
from collections.abc import Iterable

from scenario_engine.errors import PolicyViolation

SENTENCE_TERMINATORS = ".!?"
MIN_TRAILING_FRAGMENT = 10
CLOSING_MARKS = "\"'”’)»"

_WHITESPACE = re.compile(r"\s+")


def _fold(text: str) -> str:
    return unicodedata.normalize("NFC", text).lower()


class SafetyFilter:
    """Denylist check on topics plus structural clean-up of output.

    Generated content is only scanned against the denylist when
    ``scan_output`` is enabled; by default only the topic is checked.
    """

    def __init__(self, blocked_keywords: Iterable[str], scan_output: bool = False) -> None:
        """Initialize the filter.

        Args:
            blocked_keywords: Denylisted substrings, matched case-insensitively.
            scan_output: Also scan generated content against the denylist.
        """
        self._blocked = tuple(
            folded for folded in (_fold(keyword.strip()) for keyword in blocked_keywords) if folded
        )
        self._scan_output = scan_output

    @property
    def blocked_keywords(self) -> tuple[str, ...]:
        return self._blocked

    @property
    def scans_output(self) -> bool:
        return self._scan_output

    def find_violation(self, text: str) -> str | None:
        """Return the first denylisted keyword found in the text, if any."""
        folded = _fold(text)
        for keyword in self._blocked:
            if keyword in folded:
                return keyword
        return None

    def check_topic(self, topic: str) -> None:
        """Reject a denylisted topic.

        Raises:
            PolicyViolation: If the topic contains a denylisted keyword
        """
        keyword = self.find_violation(topic)
        if keyword is not None:
            raise PolicyViolation("Topic contains inappropriate content", keyword=keyword)

    def output_violation(self, content: str) -> str | None:
        """Scan generated content when output scanning is enabled."""
        if not self._scan_output:
            return None
        return self.find_violation(content)

    @staticmethod
    def post_process(content: str) -> str:
        """Normalize whitespace and drop a dangling sentence fragment.

        If the text after the last sentence terminator is shorter than
        ``MIN_TRAILING_FRAGMENT`` characters it is cut off, keeping the
        terminator. Text without any terminator is left as is.
        """
        processed = _WHITESPACE.sub(" ", content.strip())

        last_terminator = max(processed.rfind(mark) for mark in SENTENCE_TERMINATORS)
        if last_terminator == -1:
            return processed

        fragment = processed[last_terminator + 1 :].strip()
        if fragment and all(mark in CLOSING_MARKS for mark in fragment):
            return processed
        if len(fragment) < MIN_TRAILING_FRAGMENT:
            processed = processed[: last_terminator + 1]
        return processed
