"""Static question bank.

Each entry carries the prompt shown to participants and the ground-truth
percentage used for scoring. Order matters: ``GameState.current_question`` is
a 1-based index into ``QUESTIONS``.
"""

from typing import Optional

QUESTIONS = [
    {
        'id': 1,
        'question': 'Will an AI solve any important mathematical conjecture before January 1st, 2030?',
        'answer': 80,
    },
    {
        'id': 2,
        'question': 'In 2028, will an AI be able to generate a full high-quality movie to a prompt?',
        'answer': 43,
    },
    {
        'id': 3,
        'question': 'Will there be a song created by an AI system in the year-end top 100 Billboards chart by 2026?',
        'answer': 52,
    },
    {
        'id': 4,
        'question': 'Will a book written by a language model make the NY Times Best Seller list before 2030?',
        'answer': 65,
    },
    {
        'id': 5,
        'question': 'Will a large language model beat a super grandmaster playing chess by 2028?',
        'answer': 69,
    },
    {
        'id': 6,
        'question': 'Will we get AGI before 2030?',
        'answer': 57,
    },
    {
        'id': 7,
        'question': 'Will there be a positive transition to a world with radically smarter-than-human artificial intelligence?',
        'answer': 51,
    },
    {
        'id': 8,
        'question': 'Will AI NOT cause mass unemployment by 2030? (<25% unemployment)',
        'answer': 80,
    },
    {
        'id': 9,
        'question': 'Before 2032, will AI NOT cause at least 100 deaths or $1B in economic damage?',
        'answer': 20,
    },
]


def question_count() -> int:
    return len(QUESTIONS)


def get_question(index: int) -> Optional[dict]:
    """Return the question at a 1-based position, or None when out of range."""
    if 1 <= index <= len(QUESTIONS):
        return QUESTIONS[index - 1]
    return None


def public_question(question: Optional[dict], reveal_answer: bool = False) -> Optional[dict]:
    if question is None:
        return None
    data = {'id': question['id'], 'question': question['question']}
    if reveal_answer:
        data['answer'] = question['answer']
    return data
