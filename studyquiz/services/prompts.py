"""
Prompt templates for the Gemini collaborator
"""
from typing import List

from studyquiz.config import settings
from studyquiz.schemas.generation import MissedQuestion, PriorQuestion, WrongAnswerDetail

JSON_SYSTEM_INSTRUCTION = (
    "You are an expert educator who writes multiple-choice quizzes. "
    "Always answer with valid JSON only, without markdown formatting."
)

SUMMARY_SYSTEM_INSTRUCTION = (
    "You are a patient, didactic teacher who writes personalized review notes "
    "that help students improve."
)

QUESTION_FORMAT = """
Return ONLY valid JSON in this exact format (no markdown, no preamble):

{{
  "questions": [
    {{
      "statement": "Question text here?",
      "options": [
        {{ "text": "Option A", "correct": false }},
        {{ "text": "Option B", "correct": true }},
        {{ "text": "Option C", "correct": false }},
        {{ "text": "Option D", "correct": false }}
      ],
      "explanation": "Why option B is correct, in 1-2 sentences."
    }}
  ]
}}

IMPORTANT: return EXACTLY {num_questions} questions, each with EXACTLY {num_options} options.
"""

QUESTION_RULES = """
RULES:
1. Every question has EXACTLY {num_options} options
2. EXACTLY 1 option is correct
3. Wrong options are plausible but clearly distinct from the correct one
4. Include a short explanation (1-2 sentences) of why the answer is correct
5. Avoid ambiguous or trick questions
6. Use clear, objective language
"""


def _format_and_rules() -> str:
    values = {
        "num_questions": settings.QUESTIONS_PER_QUIZ,
        "num_options": settings.OPTIONS_PER_QUESTION,
    }
    return QUESTION_RULES.format(**values) + QUESTION_FORMAT.format(**values)


def title_description_prompt(raw_text: str) -> str:
    return f"""
You are an educational assistant that writes titles and descriptions for study material.

Based on the text below, write:
1. A concise, informative title (at most 100 characters)
2. A clear description of what will be studied (at most 300 characters)

Text:
\"\"\"{raw_text}\"\"\"

Return ONLY valid JSON (no markdown):
{{
  "title": "title here",
  "description": "description here"
}}
"""


def fresh_quiz_prompt(raw_text: str, title: str, description: str) -> str:
    return f"""
You are an expert teacher creating a high-quality quiz.

CONTEXT:
Title: {title}
Description: {description}
Full content: {raw_text}

TASK:
Create a quiz with EXACTLY {settings.QUESTIONS_PER_QUIZ} multiple-choice questions about this content.
- Cover different aspects of the content
- Vary the difficulty (easy, medium, hard)
{_format_and_rules()}"""


def reinforcement_quiz_prompt(title: str, raw_text: str, prior_questions: List[PriorQuestion]) -> str:
    asked = "\n".join(
        f"{index}. {question.statement}\n   Options: {', '.join(question.options)}"
        for index, question in enumerate(prior_questions, start=1)
    )
    return f"""
You are an expert teacher creating a follow-up quiz on material the student has already practiced.

CONTEXT:
Content title: {title}
Original content: {raw_text}

The student has already answered these questions:
{asked}

TASK:
Create a NEW quiz with EXACTLY {settings.QUESTIONS_PER_QUIZ} multiple-choice questions.

FOCUS:
1. Do NOT repeat any of the questions above
2. Do NOT closely paraphrase them or test the same narrow concept again
3. Explore NEW aspects and angles of the same content
4. Go deeper into different details
5. Raise the difficulty progressively
{_format_and_rules()}"""


def progression_quiz_prompt(title: str, raw_text: str, missed: List[MissedQuestion]) -> str:
    gaps = "\n".join(
        f"{index}. Original question: {item.statement}\n"
        f"   Correct answer: {item.correct_text}\n"
        f"   Explanation: {item.explanation}"
        for index, item in enumerate(missed, start=1)
    )
    return f"""
You are an expert teacher creating a progression quiz focused on a student's knowledge gaps.

CONTEXT:
Content title: {title}
Original content: {raw_text}

In their most recent attempt the student got these questions wrong. Treat each one as a
sub-topic that needs to be reinforced:
{gaps}

TASK:
Create a NEW quiz with EXACTLY {settings.QUESTIONS_PER_QUIZ} multiple-choice questions.

FOCUS:
1. Drill into the sub-topics implied by the wrong questions and their explanations
2. Do not repeat those statements or their options verbatim
3. Use variations and levels of detail that help the student progress on these sub-topics
4. Keep an encouraging tone with gradually increasing demand
{_format_and_rules()}"""


def summary_prompt(
    content_title: str,
    wrong_answers: List[WrongAnswerDetail],
    total_questions: int,
) -> str:
    errors = "\n".join(
        f"Error {index}:\n"
        f"Question: {item.statement}\n"
        f"Your answer: {item.chosen_text}\n"
        f"Correct answer: {item.correct_text}\n"
        f"Explanation: {item.explanation}\n"
        for index, item in enumerate(wrong_answers, start=1)
    )
    return f"""
You are a teacher writing a personalized review for a student.

CONTEXT:
The student has just taken a quiz about: "{content_title}"
They got {len(wrong_answers)} of {total_questions} questions wrong.

MISTAKES:
{errors}

TASK:
Write an educational review (at most 500 words) that:
1. Identifies the concepts the student needs to review
2. Explains clearly and didactically where each mistake came from
3. Gives practical tips to memorize or better understand these concepts
4. Uses encouraging, motivating language
5. Suggests how to do better on the next quiz

FORMAT:
Plain running text in paragraphs. No markdown, no headings, no greeting.
"""
