from __future__ import annotations

from ytscribe.config import SUMMARY_LANGUAGES

_SUMMARY_INTROS: dict[str, str] = {
    "en": (
        "You will receive a long transcript of a video or text content. Your task is to write "
        "a high-quality, structured summary of the content in English."
    ),
    "ru": (
        "Вы получите длинную расшифровку видео или текстового контента. Ваша задача - написать "
        "качественное, структурированное резюме контента на русском языке."
    ),
}

_SUMMARY_FORMATS: dict[str, str] = {
    "en": """# Overview
• Who the speaker is and why the material was created
• Core message and problem being solved
• Value proposition of the content

# Content Structure
• Brief breakdown of key points and flow
• Main arguments or concepts presented

# Practical Benefits
• Clear explanation of audience takeaways
• Real-world applications

# Conclusion
A powerful, concise wrap-up

# 🎯 Key Highlights
• Use emojis for each major takeaway
• Focus on actionable insights
• Highlight surprising or unique points

# 💡 Deep Insights
## Pattern 1
Brief explanation of first key pattern or insight

## Pattern 2
Brief explanation of second key pattern or insight""",
    "ru": """# Обзор
• Кто спикер и почему был создан материал
• Основной посыл и решаемая проблема
• Ценностное предложение контента

# Структура контента
• Краткая разбивка ключевых моментов
• Основные аргументы и концепции

# Практическая польза
• Четкое объяснение выводов для аудитории
• Применение в реальном мире

# Заключение
Краткий и емкий итог

# 🎯 Ключевые моменты
• Используйте эмодзи для каждого важного вывода
• Фокус на практических рекомендациях
• Выделение неожиданных или уникальных моментов

# 💡 Глубокие выводы
## Паттерн 1
Краткое объяснение первого ключевого паттерна

## Паттерн 2
Краткое объяснение второго ключевого паттерна""",
}

SEARCH_SYSTEM_PROMPT = """You are a helpful assistant that finds relevant parts in a video transcript based on user queries.
The transcript is formatted with timestamps like [MM:SS].

Return your response in this exact JSON format:
{{
  "matches": [
    {{
      "timestamp": "MM:SS",
      "text": "relevant text from transcript"
    }}
  ]
}}

Rules:
1. Always return valid JSON
2. Include up to {max_matches} most relevant matches
3. Keep the text excerpts brief and relevant
4. Ensure timestamps are in MM:SS format"""

CHAT_GREETING = "Want to discuss the summary?"

CHAT_SYSTEM_TEMPLATE = (
    "You are a helpful assistant discussing a video summary. Here's the summary:\n\n"
    "{summary}\n\n"
    "Stay focused on this content and help users understand it better."
)


def list_languages() -> list[str]:
    return sorted(SUMMARY_LANGUAGES)


def summary_system_prompt(language: str) -> str:
    key = language.lower().strip()
    if key not in _SUMMARY_FORMATS:
        allowed = ", ".join(list_languages())
        raise ValueError(f"Unknown summary language '{language}'. Allowed: {allowed}")
    return f"{_SUMMARY_INTROS[key]}\n\n{_SUMMARY_FORMATS[key]}"


def search_system_prompt(max_matches: int = 3) -> str:
    return SEARCH_SYSTEM_PROMPT.format(max_matches=max_matches)


def search_user_prompt(annotated_transcript: str, query: str) -> str:
    return f"Transcript:\n{annotated_transcript}\n\nQuery: {query}"


def chat_system_prompt(summary: str) -> str:
    return CHAT_SYSTEM_TEMPLATE.format(summary=summary)
