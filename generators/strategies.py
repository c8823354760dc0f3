"""
Mutation strategies for typosquat generation.

Each name strategy is a pure function ``word -> iterator of variants``.
They hold no state, never deduplicate and always produce variants in
left-to-right position order, so the same word always yields the same
sequence. ``change_suffix`` is the odd one out: it varies the public
suffix instead of the name.
"""
from dataclasses import dataclass, fields, replace
from itertools import groupby
from typing import Iterator, Sequence, Tuple

from utils.errors import StrategyInputError

OMIT_REPEATED = 'omit-repeated'
REPEAT_SINGLE = 'repeat-single'
SWAP_PAIR = 'swap-pair'
CHANGE_SUFFIX = 'change-suffix'

# Commonly confused adjacent character pairs, both orderings listed
SWAP_PAIRS: Tuple[Tuple[str, str], ...] = (
    ('ie', 'ei'), ('ei', 'ie'),
    ('ou', 'uo'), ('uo', 'ou'),
    ('ea', 'ae'), ('ae', 'ea'),
    ('ai', 'ia'), ('ia', 'ai'),
    ('au', 'ua'), ('ua', 'au'),
    ('io', 'oi'), ('oi', 'io'),
    ('er', 're'), ('re', 'er'),
    ('el', 'le'), ('le', 'el'),
)

# Alternate public suffixes tried by change_suffix, in output order
ALTERNATE_SUFFIXES: Tuple[str, ...] = (
    '.com', '.net', '.org', '.info', '.biz', '.co', '.io', '.us',
    '.co.uk', '.de', '.ru', '.cn', '.xyz', '.online', '.site',
)


def _require_word(word: str) -> None:
    if not word:
        raise StrategyInputError("cannot mutate an empty name")


def omit_repeated_chars(word: str) -> Iterator[str]:
    """Collapse each maximal run of a repeated character, one run at a time."""
    _require_word(word)

    position = 0
    for char, run in groupby(word):
        length = len(list(run))
        if length > 1:
            yield word[:position] + char + word[position + length:]
        position += length


def repeat_single_chars(word: str) -> Iterator[str]:
    """Duplicate the character at each position in turn."""
    _require_word(word)

    for i, char in enumerate(word):
        yield word[:i] + char + word[i:]


def swap_char_pairs(word: str, pairs: Sequence[Tuple[str, str]] = SWAP_PAIRS) -> Iterator[str]:
    """
    Replace one occurrence of a confusable pair with its counterpart.

    Every occurrence is swapped independently, overlapping ones included,
    e.g. ``eie`` gives ``iee`` (the ``ei`` at 0) and ``eei`` (the ``ie`` at 1).
    """
    _require_word(word)

    for i in range(len(word)):
        for pair, swapped in pairs:
            if word.startswith(pair, i):
                yield word[:i] + swapped + word[i + len(pair):]


def change_suffix(suffix: str, alternates: Sequence[str] = ALTERNATE_SUFFIXES) -> Iterator[str]:
    """Yield each alternate public suffix that differs from `suffix`."""
    original = suffix.lower()
    for alternate in alternates:
        if alternate.lower() != original:
            yield alternate


@dataclass(frozen=True)
class StrategyConfig:
    """Which strategies are enabled. Field order is evaluation order."""
    omit_chars: bool = True
    repeat_chars: bool = True
    swap_chars: bool = True
    change_suffix: bool = True

    @classmethod
    def none(cls) -> 'StrategyConfig':
        return cls(False, False, False, False)

    def toggled(self, **flags: bool) -> 'StrategyConfig':
        """Return a copy with every field named in `flags` (and true) flipped."""
        unknown = set(flags) - {f.name for f in fields(self)}
        if unknown:
            raise ValueError(f"unknown strategies: {', '.join(sorted(unknown))}")
        return replace(self, **{
            name: not getattr(self, name) for name, flip in flags.items() if flip
        })

    @property
    def any_enabled(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))
