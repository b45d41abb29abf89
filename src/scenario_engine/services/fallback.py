"""Static, non-generative fallback content.

Used when every provider failed, so callers still get a readable scenario
instead of an empty screen.
"""

import hashlib
import re

from scenario_engine.entities import ProviderResponse, TokenUsage

FALLBACK_PROVIDER = "fallback"
FALLBACK_MODEL = "static-template"

_LEADING_WHAT_IF = re.compile(r"^\s*(nếu như|nếu|what if|if)\b[\s,:.-]*", re.IGNORECASE)

DEFAULT_TEMPLATES: tuple[str, ...] = (
    """Nếu như {premise}, thế giới sẽ trở thành một nơi hoàn toàn khác biệt. Những quy luật mà chúng ta từng quen thuộc có thể không còn đúng nữa, mở ra những hiện tượng mà con người chưa từng chứng kiến.

Trong thực tế mới này, mọi người sẽ phải học cách thích nghi và khám phá những khả năng chưa từng có. Các nhà khoa học sẽ viết lại sách giáo khoa, còn các nghệ sĩ sẽ tìm thấy nguồn cảm hứng vô tận.

Có lẽ điều quan trọng nhất là chúng ta sẽ nhận ra rằng, dù thế giới thay đổi thế nào, tình người và khao khát khám phá vẫn là những giá trị không bao giờ phai nhạt.""",
    """Nếu như {premise}, cuộc sống hằng ngày của chúng ta sẽ thay đổi theo những cách khó tưởng tượng. Từ lúc thức dậy vào buổi sáng đến khi kết thúc một ngày, mọi thứ đều mang một màu sắc mới.

Xã hội sẽ phải đặt ra những quy tắc và chuẩn mực mới. Giáo dục, kinh tế và cả cách chúng ta trò chuyện với nhau cũng sẽ được định hình lại.

Nhưng giữa tất cả những thay đổi đó, điều tuyệt vời nhất là chúng ta có cơ hội nhìn thế giới từ một góc độ hoàn toàn khác và khám phá những điều kỳ diệu chưa từng nghĩ tới.""",
)


class StaticFallback:
    """Builds pre-written scenarios parameterized by the topic.

    The template is picked from a hash of the normalized topic, so the same
    topic always gets the same fallback text.
    """

    def __init__(self, templates: tuple[str, ...] = DEFAULT_TEMPLATES) -> None:
        if not templates:
            raise ValueError("StaticFallback needs at least one template")
        self._templates = templates

    def render(self, topic: str) -> str:
        """Render fallback text for a topic."""
        premise = _LEADING_WHAT_IF.sub("", topic.strip()).rstrip(" ?!.") or topic.strip()
        digest = hashlib.sha256(topic.strip().lower().encode("utf-8")).digest()
        template = self._templates[digest[0] % len(self._templates)]
        return template.format(premise=premise[:1].lower() + premise[1:])

    def respond(self, topic: str) -> ProviderResponse:
        """Wrap fallback text as if a provider had produced it."""
        return ProviderResponse(
            content=self.render(topic),
            provider_name=FALLBACK_PROVIDER,
            model_name=FALLBACK_MODEL,
            token_usage=TokenUsage(),
        )
