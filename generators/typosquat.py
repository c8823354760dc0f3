import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from generators.strategies import (
    ALTERNATE_SUFFIXES,
    CHANGE_SUFFIX,
    OMIT_REPEATED,
    REPEAT_SINGLE,
    SWAP_PAIR,
    SWAP_PAIRS,
    StrategyConfig,
    change_suffix,
    omit_repeated_chars,
    repeat_single_chars,
    swap_char_pairs,
)
from utils.errors import StrategyInputError
from utils.validators import DomainName, is_valid_domain, is_valid_name

logger = logging.getLogger("generator.typosquat")


@dataclass(frozen=True)
class Candidate:
    """A generated typosquat domain and the strategy that produced it"""
    domain: str
    strategy: str

    def __str__(self) -> str:
        return self.domain


class CandidateStream:
    """
    Lazy, restartable sequence of candidates for one domain.

    Nothing is computed until iteration starts, and every call to
    ``iter()`` runs a fresh pass with its own deduplication set.
    """

    def __init__(self, generator: 'TyposquatGenerator', domain: DomainName):
        self.generator = generator
        self.domain = domain

    def __iter__(self) -> Iterator[Candidate]:
        return self.generator.iter_candidates(self.domain)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.domain})"


class TyposquatGenerator:
    """Generate typosquat candidates from the enabled mutation strategies"""

    def __init__(self,
                 config: Optional[StrategyConfig] = None,
                 swap_pairs: Optional[Sequence[Tuple[str, str]]] = None,
                 alternate_suffixes: Optional[Sequence[str]] = None):
        self.config = config if config is not None else StrategyConfig()
        self.swap_pairs = tuple(swap_pairs) if swap_pairs is not None else SWAP_PAIRS
        self.alternate_suffixes = (
            tuple(alternate_suffixes) if alternate_suffixes is not None else ALTERNATE_SUFFIXES
        )

    def name_strategies(self) -> List[Tuple[str, Callable[[str], Iterator[str]]]]:
        """Enabled name-mutating strategies, in evaluation order."""
        strategies = []
        if self.config.omit_chars:
            strategies.append((OMIT_REPEATED, omit_repeated_chars))
        if self.config.repeat_chars:
            strategies.append((REPEAT_SINGLE, repeat_single_chars))
        if self.config.swap_chars:
            strategies.append((SWAP_PAIR, lambda word: swap_char_pairs(word, self.swap_pairs)))
        return strategies

    def word_variants(self, word: str) -> Iterator[Tuple[str, str]]:
        """
        Yield ``(variant, strategy)`` for a bare word using the name strategies.

        Variants are deduplicated and never equal to `word`.
        """
        if not word:
            raise StrategyInputError("cannot mutate an empty word")

        seen = {word.lower()}
        for strategy, mutate in self.name_strategies():
            for variant in mutate(word):
                key = variant.lower()
                if key in seen:
                    continue
                seen.add(key)
                yield variant, strategy

    def candidates(self, domain: DomainName) -> CandidateStream:
        return CandidateStream(self, domain)

    def iter_candidates(self, domain: DomainName) -> Iterator[Candidate]:
        """Run one generation pass over `domain`"""
        if not domain.name:
            raise StrategyInputError(f"empty name for suffix {domain.suffix!r}")

        original = str(domain).lower()
        seen = {original}
        produced = 0

        def emit(candidate_domain: str, strategy: str) -> Optional[Candidate]:
            key = candidate_domain.lower()
            if key in seen:
                return None
            seen.add(key)
            return Candidate(domain=candidate_domain, strategy=strategy)

        for strategy, mutate in self.name_strategies():
            for variant in mutate(domain.name):
                candidate_domain = f"{variant}{domain.suffix}"
                if not is_valid_domain(candidate_domain, domain.suffix):
                    logger.debug(f"Skipping invalid {strategy} variant: {candidate_domain}")
                    continue
                candidate = emit(candidate_domain, strategy)
                if candidate:
                    produced += 1
                    yield candidate

        if self.config.change_suffix:
            for suffix in change_suffix(domain.suffix, self.alternate_suffixes):
                if not is_valid_name(suffix[1:]):
                    logger.debug(f"Skipping invalid alternate suffix: {suffix!r}")
                    continue
                candidate = emit(f"{domain.name}{suffix}", CHANGE_SUFFIX)
                if candidate:
                    produced += 1
                    yield candidate

        logger.info(f"Generated {produced} candidates for {original}")
