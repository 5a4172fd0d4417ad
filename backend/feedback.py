"""Grammar feedback rendering.

Turns grammar-checker matches into the human-readable correction strings
shown under a user message, and adds encouragement heuristics.
"""

import logging
from typing import Iterable, List, Optional

from domain.models import Feedback
from models import GrammarMatch

logger = logging.getLogger(__name__)

FULL_SENTENCE_SUGGESTION = "Super phrase complète !"

# An utterance longer than this many words earns the full-sentence praise.
FULL_SENTENCE_WORD_THRESHOLD = 5


def render_correction(message: str, replacement: Optional[str] = None) -> str:
    """Format one correction: the checker message plus its best replacement.

    Example: render_correction("Accord incorrect.", "les") ->
             'Accord incorrect. → Essayez: "les"'
    """
    if replacement:
        return f'{message} → Essayez: "{replacement}"'
    return message


def corrections_from_matches(matches: Iterable[GrammarMatch]) -> List[str]:
    """Render matches in checker order, using only the first replacement of each."""
    corrections = []
    for match in matches:
        best = match.replacements[0].value if match.replacements else None
        corrections.append(render_correction(match.message, best))
    return corrections


def heuristic_suggestions(text: str) -> List[str]:
    suggestions = []
    if len(text.split()) > FULL_SENTENCE_WORD_THRESHOLD:
        suggestions.append(FULL_SENTENCE_SUGGESTION)
    return suggestions


def build_feedback(text: str, matches: Iterable[GrammarMatch]) -> Feedback:
    """Assemble a fresh Feedback for one utterance."""
    corrections = corrections_from_matches(matches)
    suggestions = heuristic_suggestions(text)
    logger.debug(f"Feedback: {len(corrections)} corrections, {len(suggestions)} suggestions")
    return Feedback(corrections=tuple(corrections), suggestions=tuple(suggestions))
