"""
Grading Logic - Pure auto-grading of test item answers.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.

Answer payloads (JSON):
    quiz_question:    "B" or {"answer": "B"}
    coding_challenge: {"outputs": ["3", "7"]}, one output per test case
    ctf_challenge:    "FLAG{...}" or {"flag": "FLAG{...}"}
    essay_question:   "text" or {"text": "..."}; graded manually
"""
from typing import Any, Iterable, List, Optional, Tuple

KIND_QUIZ = 'quiz_question'
KIND_ESSAY = 'essay_question'
KIND_CODING = 'coding_challenge'
KIND_CTF = 'ctf_challenge'

ITEM_KINDS = (KIND_QUIZ, KIND_ESSAY, KIND_CODING, KIND_CTF)
AUTO_GRADABLE_KINDS = frozenset({KIND_QUIZ, KIND_CODING, KIND_CTF})

_TRUE_WORDS = {'true', 't', 'yes', '1'}
_FALSE_WORDS = {'false', 'f', 'no', '0'}


def is_auto_gradable(kind: str) -> bool:
    return kind in AUTO_GRADABLE_KINDS


def _unwrap(answer: Any, key: str) -> Any:
    if isinstance(answer, dict):
        return answer.get(key)
    return answer


def _normalize(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value).strip().lower()


def _normalize_boolean(value: Any) -> Optional[bool]:
    text = _normalize(value)
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


def check_quiz_answer(question_type: str, correct_answer: Any, answer: Any) -> bool:
    """Case-insensitive comparison; boolean questions accept true/false spellings."""
    given = _unwrap(answer, 'answer')
    if given is None:
        return False
    if question_type == 'boolean':
        expected = _normalize_boolean(correct_answer)
        return expected is not None and _normalize_boolean(given) == expected
    return _normalize(given) == _normalize(correct_answer)


def check_coding_answer(test_cases: List[dict], answer: Any) -> bool:
    """Every test case's expected_output must match the submitted output at the same index."""
    if not test_cases:
        return False
    outputs = _unwrap(answer, 'outputs')
    if not isinstance(outputs, list) or len(outputs) != len(test_cases):
        return False
    for case, output in zip(test_cases, outputs):
        if str(case.get('expected_output', '')).strip() != str(output if output is not None else '').strip():
            return False
    return True


def check_ctf_answer(flag: str, answer: Any) -> bool:
    """Flags are compared exactly, ignoring surrounding whitespace."""
    given = _unwrap(answer, 'flag')
    if not isinstance(given, str) or not flag:
        return False
    return given.strip() == flag.strip()


def grade_answer(kind: str, answer_key: dict, answer: Any, points: int) -> Tuple[Optional[bool], Optional[int]]:
    """
    Auto-grade one answer.

    Returns (is_correct, score); (None, None) for kinds graded manually.
    """
    if kind == KIND_QUIZ:
        correct = check_quiz_answer(answer_key.get('type'), answer_key.get('correct_answer'), answer)
    elif kind == KIND_CODING:
        correct = check_coding_answer(answer_key.get('test_cases') or [], answer)
    elif kind == KIND_CTF:
        correct = check_ctf_answer(answer_key.get('flag'), answer)
    elif kind == KIND_ESSAY:
        return None, None
    else:
        raise ValueError(f"Unknown item kind: {kind!r}")
    return correct, (points if correct else 0)


def total_score(scores: Iterable[Optional[int]]) -> int:
    """Sum of the scores given so far; ungraded submissions count as 0."""
    return sum(score for score in scores if score is not None)


def all_scored(scores: Iterable[Optional[int]]) -> bool:
    return all(score is not None for score in scores)
