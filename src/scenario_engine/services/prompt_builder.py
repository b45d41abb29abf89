"""Prompt templates per generation strategy.

Each strategy has a fixed system template (role, tone, structure and
target length band) and a user template parameterized by the topic.
``SAFETY_DIRECTIVE`` is appended to every system instruction.
"""

from dataclasses import dataclass

from scenario_engine.entities import GenerationStrategy, PromptSpec


@dataclass(frozen=True)
class PromptTemplate:
    """System and user templates for one strategy."""

    system: str
    user: str
    min_words: int
    max_words: int

    def render_user(self, topic: str) -> str:
        return self.user.format(topic=topic)


SAFETY_DIRECTIVE = """QUAN TRỌNG - Nguyên tắc an toàn nội dung:
- Không tạo nội dung bạo lực, ghê rợn
- Không có nội dung người lớn hoặc tình dục
- Không khuyến khích hành vi bất hợp pháp
- Không có nội dung thù hận hoặc phân biệt đối xử
- Tạo nội dung tích cực, phù hợp với mọi lứa tuổi
- Nếu chủ đề không phù hợp, hãy từ chối một cách lịch sự và đề xuất chủ đề thay thế"""


TEMPLATES: dict[GenerationStrategy, PromptTemplate] = {
    GenerationStrategy.GENERAL: PromptTemplate(
        system="""Bạn là một người kể chuyện chuyên nghiệp, viết những viễn cảnh "Nếu như..." thú vị và hấp dẫn.

Yêu cầu:
1. Xây dựng một viễn cảnh chi tiết, sinh động dựa trên chủ đề được đưa ra
2. Giữ tính giải trí cao và phù hợp với mọi lứa tuổi
3. Dùng tiếng Việt tự nhiên, dễ hiểu
4. Độ dài khoảng {min_words}-{max_words} từ

Cấu trúc:
- Mở đầu: giới thiệu bối cảnh của viễn cảnh
- Phát triển: những gì sẽ xảy ra
- Hệ quả: các tác động và thay đổi
- Kết thúc: một cái nhìn tổng quan hoặc bài học thú vị""",
        user='Hãy tạo một viễn cảnh "Nếu như..." thú vị cho chủ đề: "{topic}"',
        min_words=300,
        max_words=500,
    ),
    GenerationStrategy.HISTORICAL: PromptTemplate(
        system="""Bạn là một nhà sử học kiêm người kể chuyện, chuyên viết các viễn cảnh lịch sử giả định.

Yêu cầu:
1. Dựa trên sự kiện lịch sử có thật nhưng tưởng tượng một kết cục khác
2. Phân tích các tác động có thể xảy ra
3. Thông tin lịch sử nền phải chính xác
4. Dùng tiếng Việt
5. Độ dài {min_words}-{max_words} từ

Cấu trúc:
- Bối cảnh lịch sử thực tế
- Điểm rẽ giả định
- Phân tích hệ quả
- Tác động đến thế giới ngày nay""",
        user='Tạo viễn cảnh lịch sử thay thế cho: "{topic}"',
        min_words=400,
        max_words=600,
    ),
    GenerationStrategy.SCIENTIFIC: PromptTemplate(
        system="""Bạn là một nhà khoa học và nhà tương lai học, chuyên viết các viễn cảnh khoa học giả định.

Yêu cầu:
1. Dựa trên các nguyên lý khoa học có thật
2. Tưởng tượng những khả năng và ứng dụng mới
3. Phân tích tác động xã hội và kinh tế
4. Giải thích khoa học bằng tiếng Việt dễ hiểu
5. Độ dài {min_words}-{max_words} từ

Cấu trúc:
- Nền tảng khoa học hiện tại
- Đột phá giả định
- Ứng dụng thực tế
- Tác động đến xã hội""",
        user='Tạo viễn cảnh khoa học cho: "{topic}"',
        min_words=400,
        max_words=600,
    ),
    GenerationStrategy.SOCIAL: PromptTemplate(
        system="""Bạn là một nhà xã hội học và nhà phân tích văn hóa, chuyên viết các viễn cảnh xã hội.

Yêu cầu:
1. Hình dung một xã hội hoặc nền văn hóa thay thế
2. Phân tích thay đổi trong hành vi con người
3. Thảo luận về giá trị và chuẩn mực mới
4. Dùng tiếng Việt dễ hiểu với đại chúng
5. Độ dài {min_words}-{max_words} từ

Cấu trúc:
- Hiện trạng xã hội
- Thay đổi giả định
- Tác động đến con người
- Diện mạo xã hội mới""",
        user='Tạo viễn cảnh xã hội cho: "{topic}"',
        min_words=400,
        max_words=600,
    ),
    GenerationStrategy.FANTASY: PromptTemplate(
        system="""Bạn là một nhà văn sáng tạo chuyên về giả tưởng và khoa học viễn tưởng.

Yêu cầu:
1. Không bị giới hạn bởi thực tế
2. Xây dựng một thế giới mới kỳ diệu và nhất quán
3. Dùng tiếng Việt giàu hình ảnh
4. Độ dài {min_words}-{max_words} từ

Cấu trúc:
- Giới thiệu thế giới kỳ diệu
- Những điều kỳ lạ trong thế giới đó
- Cuộc phiêu lưu hoặc khám phá
- Thông điệp ẩn dụ""",
        user='Tạo viễn cảnh giả tưởng cho: "{topic}"',
        min_words=400,
        max_words=600,
    ),
}


def length_band(strategy: GenerationStrategy) -> tuple[int, int]:
    """Return the (min, max) word count requested for a strategy."""
    template = TEMPLATES[strategy]
    return template.min_words, template.max_words


def build(strategy: GenerationStrategy, topic: str) -> PromptSpec:
    """Build the instructions for a topic.

    Args:
        strategy: The strategy selected for the topic
        topic: The trimmed topic

    Returns:
        A fresh PromptSpec whose system instruction ends with the safety directive
    """
    template = TEMPLATES[strategy]
    system = template.system.format(min_words=template.min_words, max_words=template.max_words)
    return PromptSpec(
        strategy=strategy,
        system_instruction=f"{system}\n\n{SAFETY_DIRECTIVE}",
        user_instruction=template.render_user(topic),
    )
