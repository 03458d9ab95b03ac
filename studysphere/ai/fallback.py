"""
Canned answers and follow-up suggestions

Both tables go through the same first-match keyword lookup so the chat
route and the chat session never drift apart.
"""

from typing import List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

KeywordTable = Sequence[Tuple[Tuple[str, ...], T]]


def match_keyword_table(text: str, table: KeywordTable, default: Optional[T] = None) -> Optional[T]:
    """Return the value of the first row whose keywords occur in text (case-insensitive)"""
    lowered = text.lower()
    for keywords, value in table:
        if any(keyword in lowered for keyword in keywords):
            return value
    return default


# ==================== EDUCATIONAL ANSWERS ====================

EDUCATIONAL_ANSWERS: KeywordTable = (
    (("javascript",),
     "JavaScript is a versatile programming language used for web development. It runs in browsers "
     "and servers, allowing you to create interactive websites, web applications, and even mobile apps. "
     "Key features include variables, functions, objects, and event handling."),
    (("react",),
     "React is a JavaScript library for building user interfaces. It uses components to create reusable "
     "UI elements and manages state efficiently. Key concepts include JSX, components, props, and hooks "
     "like useState and useEffect."),
    (("css",),
     "CSS (Cascading Style Sheets) is used to style HTML elements. It controls layout, colors, fonts, "
     "and animations. Key concepts include selectors, properties, flexbox, grid, and responsive design "
     "with media queries."),
    (("html",),
     "HTML (HyperText Markup Language) is the foundation of web pages. It uses tags to structure content "
     "like headings, paragraphs, links, and images. Key elements include divs, spans, forms, and semantic "
     "tags like header, nav, and footer."),
    (("python",),
     "Python is a beginner-friendly programming language known for its clean syntax. It's widely used "
     "for web development, data science, automation, and AI. Key features include variables, functions, "
     "lists, dictionaries, and libraries like NumPy and Pandas."),
    (("quiz", "test"),
     "Great question about quizzes! To succeed: read questions carefully, eliminate wrong answers first, "
     "manage your time, review your work, and practice regularly. Don't rush - understanding concepts "
     "is more important than speed."),
    (("study", "learn"),
     "Effective study strategies include: active learning (practice coding), spaced repetition, breaking "
     "complex topics into smaller parts, teaching concepts to others, and building projects to apply "
     "your knowledge. Set specific goals and take regular breaks!"),
)

GENERIC_ANSWER_TEMPLATE = (
    'Thanks for your question about "{message}". While I\'m having technical difficulties with my AI '
    "service, I can still help you with programming concepts, study strategies, quiz preparation, and "
    "course material. Feel free to ask about specific topics like JavaScript, React, Python, or study "
    "techniques!"
)


def educational_response(message: str) -> str:
    answer = match_keyword_table(message, EDUCATIONAL_ANSWERS)
    if answer is None:
        return GENERIC_ANSWER_TEMPLATE.format(message=message)
    return answer


# ==================== SUGGESTIONS ====================

SUGGESTION_TABLE: KeywordTable = (
    (("quiz", "question", "answer"),
     ("Quiz taking strategies", "I can't submit my quiz", "Quiz timer issues")),
    (("lesson", "doubt", "understand", "concept"),
     ("JavaScript functions explained", "React components basics", "Need practice examples")),
    (("technical", "problem", "issue", "error"),
     ("Video won't load", "Can't access course", "Login problems")),
    (("study", "tip", "learn", "improve"),
     ("How to practice coding?", "Best note-taking methods", "Managing study time")),
    (("hello", "hi", "hey"),
     ("Quiz help", "Explain a concept", "Study tips", "Technical support")),
)

DEFAULT_SUGGESTIONS = ("I need quiz help", "Explain a concept", "Study strategies", "Technical issue")


def suggestions_for(message: str) -> List[str]:
    return list(match_keyword_table(message, SUGGESTION_TABLE, DEFAULT_SUGGESTIONS))
