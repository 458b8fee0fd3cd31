"""Guess evaluation and keyboard aggregation."""
from collections import Counter
from typing import Dict, Iterable, List

from bwordible.models.puzzle_models import LetterStatus

SHARE_SQUARES = {
    LetterStatus.CORRECT: "\U0001F7E9",
    LetterStatus.PRESENT: "\U0001F7E8",
    LetterStatus.ABSENT: "⬜",
}
BLOCKED_SQUARE = "⬛"
BOARD_WIDTH = 6


def evaluate_guess(guess: str, answer: str) -> List[LetterStatus]:
    """Classify each letter of ``guess`` against ``answer``.

    Exact matches are settled first; only the answer letters left over
    after that pass can mark a guessed letter as present, and each one can
    be claimed once.
    """
    if len(guess) != len(answer):
        raise ValueError(f"Guess length {len(guess)} does not match answer length {len(answer)}")

    statuses = [LetterStatus.ABSENT] * len(guess)
    remaining = Counter()

    for index, (guessed, expected) in enumerate(zip(guess, answer)):
        if guessed == expected:
            statuses[index] = LetterStatus.CORRECT
        else:
            remaining[expected] += 1

    for index, guessed in enumerate(guess):
        if statuses[index] is LetterStatus.CORRECT:
            continue
        if remaining[guessed] > 0:
            statuses[index] = LetterStatus.PRESENT
            remaining[guessed] -= 1

    return statuses


def keyboard_statuses(guesses: Iterable[str], answer: str) -> Dict[str, LetterStatus]:
    """Best status seen for every guessed letter (correct > present > absent)."""
    statuses: Dict[str, LetterStatus] = {}
    for guess in guesses:
        for letter, status in zip(guess, evaluate_guess(guess, answer)):
            existing = statuses.get(letter)
            if existing is None or status.rank > existing.rank:
                statuses[letter] = status
    return statuses


def share_row(guess: str, answer: str) -> str:
    """One emoji row for the share text, padded to the six-column board."""
    blocked = BLOCKED_SQUARE * max(0, BOARD_WIDTH - len(answer))
    return blocked + "".join(SHARE_SQUARES[status] for status in evaluate_guess(guess, answer))
