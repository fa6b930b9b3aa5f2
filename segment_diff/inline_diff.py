"""
Inline Diff Helpers
===================
Sequence, word and character diffs built on diff-match-patch.

Token arrays are diffed by mapping every distinct token to a single
character and running the character diff on the encoded strings.
"""

from typing import List, Optional, Sequence, Tuple

import diff_match_patch as dmp_module

from config_logging import get_config

from .models import ChangeType, InlinePart

DIFF_DELETE = dmp_module.diff_match_patch.DIFF_DELETE
DIFF_INSERT = dmp_module.diff_match_patch.DIFF_INSERT
DIFF_EQUAL = dmp_module.diff_match_patch.DIFF_EQUAL

_OP_TO_CHANGE = {
    DIFF_EQUAL: ChangeType.UNCHANGED,
    DIFF_DELETE: ChangeType.DELETED,
    DIFF_INSERT: ChangeType.ADDED,
}

# First code point used for encoded tokens; surrogates are skipped
_FIRST_CODE = 0x100
_SURROGATES = range(0xD800, 0xE000)


def _engine():
    dmp = dmp_module.diff_match_patch()
    dmp.Diff_Timeout = get_config().diff_timeout
    return dmp


def _code_point(index: int) -> str:
    code = _FIRST_CODE + index
    if code >= _SURROGATES.start:
        code += len(_SURROGATES)
    return chr(code)


def diff_sequences(left: Sequence[str], right: Sequence[str]) -> List[Tuple[int, List[str]]]:
    """
    Diff two token arrays.

    Returns:
        List of (op, tokens) runs with op one of DIFF_EQUAL, DIFF_DELETE,
        DIFF_INSERT; concatenating the equal and delete runs gives back
        left, the equal and insert runs give back right.
    """
    if not left and not right:
        return []

    token_to_char = {}
    char_to_token = {}

    def encode(tokens):
        chars = []
        for token in tokens:
            if token not in token_to_char:
                char = _code_point(len(token_to_char))
                token_to_char[token] = char
                char_to_token[char] = token
            chars.append(token_to_char[token])
        return ''.join(chars)

    left_encoded = encode(left)
    right_encoded = encode(right)

    runs = []
    for op, encoded in _engine().diff_main(left_encoded, right_encoded, False):
        if encoded:
            runs.append((op, [char_to_token[c] for c in encoded]))
    return runs


def get_word_diff(text1: str, text2: str) -> List[InlinePart]:
    """Word diff by whole-array alignment of the whitespace tokens."""
    parts = []
    for op, tokens in diff_sequences(text1.split(), text2.split()):
        parts.append(InlinePart(_OP_TO_CHANGE[op], ' '.join(tokens)))
    return parts


def lookahead_word_diff(text1: str, text2: str, lookahead: Optional[int] = None) -> List[InlinePart]:
    """
    Word diff that resynchronizes within a bounded window.

    Equal tokens are emitted one by one as unchanged. On a mismatch the
    next token present in both arrays within `lookahead` tokens ahead on
    each side is searched (closest first); the skipped tokens become a
    deleted run and an added run. When no resync point exists the rest
    of both sides is emitted and the walk stops.
    """
    if lookahead is None:
        lookahead = get_config().word_lookahead

    words1 = text1.split()
    words2 = text2.split()
    parts = []
    i = j = 0

    while i < len(words1) and j < len(words2):
        if words1[i] == words2[j]:
            parts.append(InlinePart(ChangeType.UNCHANGED, words1[i]))
            i += 1
            j += 1
            continue

        resync = _find_resync(words1, words2, i, j, lookahead)
        if resync is None:
            break

        next_i, next_j = resync
        if next_i > i:
            parts.append(InlinePart(ChangeType.DELETED, ' '.join(words1[i:next_i])))
        if next_j > j:
            parts.append(InlinePart(ChangeType.ADDED, ' '.join(words2[j:next_j])))
        i, j = next_i, next_j

    if i < len(words1):
        parts.append(InlinePart(ChangeType.DELETED, ' '.join(words1[i:])))
    if j < len(words2):
        parts.append(InlinePart(ChangeType.ADDED, ' '.join(words2[j:])))
    return parts


def _find_resync(words1: List[str], words2: List[str], i: int, j: int,
                 lookahead: int) -> Optional[Tuple[int, int]]:
    best = None
    best_cost = None
    for next_i in range(i, min(i + lookahead + 1, len(words1))):
        for next_j in range(j, min(j + lookahead + 1, len(words2))):
            if words1[next_i] == words2[next_j]:
                cost = (next_i - i) + (next_j - j)
                if best is None or cost < best_cost:
                    best = (next_i, next_j)
                    best_cost = cost
                break
    return best


def character_diff(text1: str, text2: str, cleanup: bool = True) -> List[Tuple[int, str]]:
    """
    Raw character diff as diff-match-patch (op, text) tuples.

    cleanup=True applies semantic cleanup for display.
    """
    dmp = _engine()
    diffs = dmp.diff_main(text1 or '', text2 or '', False)
    if cleanup:
        dmp.diff_cleanupSemantic(diffs)
    return diffs


def character_parts(text1: str, text2: str) -> List[InlinePart]:
    """Character diff as renderable parts."""
    return [InlinePart(_OP_TO_CHANGE[op], text) for op, text in character_diff(text1, text2)]
