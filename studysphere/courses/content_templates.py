"""
Static content used by the content-generation routes: the template
catalogue, the detailed course templates and the built-in question bank.
"""

import copy
from typing import Dict, List

# ==================== TEMPLATE CATALOGUE ====================

AVAILABLE_TEMPLATES = [
    {
        "id": "web-development",
        "title": "Web Development Fundamentals",
        "description": "Complete web development course with HTML, CSS, JavaScript, and React",
        "category": "Web Development",
        "level": "Beginner",
        "duration": "12 weeks",
        "moduleCount": 4,
        "estimatedHours": 48,
        "topics": ["HTML", "CSS", "JavaScript", "React", "Responsive Design"],
    },
    {
        "id": "data-science",
        "title": "Data Science with Python",
        "description": "Comprehensive data science course covering Python, statistics, and machine learning",
        "category": "Data Science",
        "level": "Intermediate",
        "duration": "16 weeks",
        "moduleCount": 4,
        "estimatedHours": 64,
        "topics": ["Python", "NumPy", "Pandas", "Statistics", "Machine Learning", "Data Visualization"],
    },
    {
        "id": "digital-marketing",
        "title": "Digital Marketing Mastery",
        "description": "Complete digital marketing course covering SEO, social media, and analytics",
        "category": "Digital Marketing",
        "level": "Beginner",
        "duration": "10 weeks",
        "moduleCount": 5,
        "estimatedHours": 40,
        "topics": ["SEO", "Social Media Marketing", "Content Marketing", "Email Marketing", "Analytics"],
    },
    {
        "id": "business-fundamentals",
        "title": "Business Fundamentals",
        "description": "Essential business concepts for entrepreneurs and professionals",
        "category": "Business",
        "level": "Beginner",
        "duration": "8 weeks",
        "moduleCount": 4,
        "estimatedHours": 32,
        "topics": ["Business Strategy", "Finance", "Marketing", "Operations", "Leadership"],
    },
]


def _lesson(title, duration, content=None):
    lesson = {"title": title, "duration": duration}
    if content:
        lesson["content"] = content
    return lesson


# ==================== DETAILED TEMPLATES ====================

_COURSE_TEMPLATES: Dict[str, dict] = {
    "web-development": {
        "title": "Web Development Fundamentals",
        "description": "Complete course covering modern web development from basics to advanced concepts",
        "category": "Web Development",
        "level": "Beginner",
        "duration": "12 weeks",
        "curriculum": [
            {
                "title": "HTML Fundamentals",
                "description": "Learn the building blocks of web pages",
                "duration": "2 weeks",
                "lessons": [
                    _lesson("HTML Structure and Syntax", "45 min", "Basic HTML structure, tags, and attributes"),
                    _lesson("Forms and Input Elements", "60 min", "Creating interactive forms"),
                    _lesson("Semantic HTML", "45 min", "Using semantic elements for better structure"),
                ],
            },
            {
                "title": "CSS Styling",
                "description": "Style your web pages with CSS",
                "duration": "3 weeks",
                "lessons": [
                    _lesson("CSS Selectors and Properties", "60 min", "Basic styling techniques"),
                    _lesson("Flexbox Layout", "75 min", "Modern layout with flexbox"),
                    _lesson("CSS Grid", "75 min", "Advanced layouts with CSS Grid"),
                    _lesson("Responsive Design", "90 min", "Making websites mobile-friendly"),
                ],
            },
            {
                "title": "JavaScript Programming",
                "description": "Add interactivity with JavaScript",
                "duration": "4 weeks",
                "lessons": [
                    _lesson("JavaScript Basics", "60 min", "Variables, functions, and control flow"),
                    _lesson("DOM Manipulation", "75 min", "Interacting with HTML elements"),
                    _lesson("Event Handling", "60 min", "Responding to user interactions"),
                    _lesson("Async JavaScript", "90 min", "Promises, async/await, and fetch API"),
                ],
            },
            {
                "title": "Modern Frameworks",
                "description": "Introduction to React and modern development",
                "duration": "3 weeks",
                "lessons": [
                    _lesson("React Basics", "90 min", "Components, props, and state"),
                    _lesson("React Hooks", "75 min", "useState, useEffect, and custom hooks"),
                    _lesson("Building a Project", "120 min", "Complete React application"),
                ],
            },
        ],
        "suggestedQuizzes": [
            {"title": "HTML Fundamentals Quiz", "moduleIndex": 0, "quizType": "module", "duration": 20, "questions": 10},
            {"title": "CSS Basics Quiz", "moduleIndex": 1, "quizType": "module", "duration": 25, "questions": 12},
            {"title": "JavaScript Quiz", "moduleIndex": 2, "quizType": "module", "duration": 30, "questions": 15},
            {"title": "React Fundamentals", "moduleIndex": 3, "quizType": "module", "duration": 25, "questions": 10},
            {"title": "Final Assessment", "quizType": "course", "duration": 60, "questions": 40},
        ],
    },
    "data-science": {
        "title": "Data Science with Python",
        "description": "Comprehensive data science course using Python and popular libraries",
        "category": "Data Science",
        "level": "Intermediate",
        "duration": "16 weeks",
        "curriculum": [
            {
                "title": "Python for Data Science",
                "description": "Python fundamentals and data science libraries",
                "duration": "4 weeks",
                "lessons": [
                    _lesson("Python Basics Review", "60 min"),
                    _lesson("NumPy for Numerical Computing", "90 min"),
                    _lesson("Pandas for Data Manipulation", "120 min"),
                    _lesson("Matplotlib and Seaborn Visualization", "90 min"),
                ],
            },
            {
                "title": "Data Analysis and Statistics",
                "description": "Statistical concepts and exploratory data analysis",
                "duration": "4 weeks",
                "lessons": [
                    _lesson("Descriptive Statistics", "75 min"),
                    _lesson("Probability Distributions", "90 min"),
                    _lesson("Hypothesis Testing", "105 min"),
                    _lesson("Correlation and Regression", "90 min"),
                ],
            },
            {
                "title": "Machine Learning Fundamentals",
                "description": "Introduction to machine learning algorithms",
                "duration": "6 weeks",
                "lessons": [
                    _lesson("Supervised Learning Overview", "75 min"),
                    _lesson("Linear and Logistic Regression", "120 min"),
                    _lesson("Decision Trees and Random Forest", "105 min"),
                    _lesson("Support Vector Machines", "90 min"),
                    _lesson("Clustering Algorithms", "90 min"),
                    _lesson("Model Evaluation and Validation", "120 min"),
                ],
            },
            {
                "title": "Advanced Topics and Projects",
                "description": "Deep learning basics and capstone project",
                "duration": "2 weeks",
                "lessons": [
                    _lesson("Introduction to Neural Networks", "105 min"),
                    _lesson("Capstone Project", "180 min"),
                ],
            },
        ],
        "suggestedQuizzes": [
            {"title": "Python & Libraries Quiz", "moduleIndex": 0, "quizType": "module", "duration": 30},
            {"title": "Statistics Quiz", "moduleIndex": 1, "quizType": "module", "duration": 35},
            {"title": "Machine Learning Quiz", "moduleIndex": 2, "quizType": "module", "duration": 45},
            {"title": "Data Science Final Exam", "quizType": "course", "duration": 90},
        ],
    },
}


def template_types() -> List[str]:
    return list(_COURSE_TEMPLATES)


def build_course_template(template_type: str, customization: dict, instructor_id: str, instructor_name: str) -> dict:
    """Deep copy of a detailed template with the caller's overrides applied. Raises KeyError on unknown type."""
    template = copy.deepcopy(_COURSE_TEMPLATES[template_type])
    if customization:
        template.update(customization)
    template["instructor"] = template.get("instructor") or instructor_name
    template["instructorId"] = instructor_id
    return template


# ==================== QUESTION BANK ====================

def _options(*texts, correct):
    return [{"text": text, "is_correct": index == correct} for index, text in enumerate(texts)]


QUESTION_BANK: Dict[str, List[dict]] = {
    "javascript": [
        {
            "question": "Which keyword is used to declare a variable in JavaScript ES6?",
            "type": "multiple-choice",
            "options": _options("var", "let", "const", "variable", correct=1),
            "explanation": "let is used to declare block-scoped variables in ES6",
            "points": 1,
        },
        {
            "question": "What does JSON stand for?",
            "type": "multiple-choice",
            "options": _options(
                "JavaScript Object Notation",
                "Java Serialized Object Network",
                "JavaScript Online Network",
                "Java Object Notation",
                correct=0,
            ),
            "explanation": "JSON stands for JavaScript Object Notation",
            "points": 1,
        },
    ],
    "python": [
        {
            "question": "Which of the following is used to create a function in Python?",
            "type": "multiple-choice",
            "options": _options("function", "def", "func", "define", correct=1),
            "explanation": "def keyword is used to define functions in Python",
            "points": 1,
        },
    ],
}


def generic_question(topic: str) -> dict:
    return {
        "question": f"What is a key concept in {topic}?",
        "type": "multiple-choice",
        "options": _options(
            "Basic understanding", "Advanced techniques", "Expert knowledge", "Theoretical concepts", correct=0
        ),
        "explanation": f"Understanding basic concepts is fundamental in {topic}",
        "points": 1,
    }


def generate_questions(topic: str, count: int) -> List[dict]:
    """Cycle through the bank for the topic until count questions are produced"""
    available = QUESTION_BANK.get(topic.lower()) or [generic_question(topic)]
    return [copy.deepcopy(available[i % len(available)]) for i in range(count)]
