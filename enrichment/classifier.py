import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Dict, Iterable, Iterator, Optional, Protocol

from config.settings import Config
from generators.typosquat import Candidate
from utils.errors import ResolutionError


class Classification(str, Enum):
    HAS_ADDRESSES = 'has-addresses'
    REGISTERED_NO_ADDRESSES = 'registered-no-addresses'
    UNREGISTERED = 'unregistered'

    @property
    def is_registered(self) -> bool:
        return self is not Classification.UNREGISTERED


class Resolver(Protocol):
    def has_addresses(self, domain: str) -> bool: ...

    def is_registered(self, domain: str) -> bool: ...

    def is_unregistered(self, domain: str) -> bool: ...


@dataclass(frozen=True)
class ClassifiedCandidate:
    candidate: Candidate
    classification: Classification
    error: Optional[str] = None

    @property
    def domain(self) -> str:
        return self.candidate.domain


class Classifier:
    """
    Tag candidates with their network status through a resolver.

    A failed lookup demotes that one candidate to UNREGISTERED and records
    the error on the result; it never stops the rest of the stream.
    """

    def __init__(self, resolver: Resolver, workers: Optional[int] = None):
        self.resolver = resolver
        self.workers = workers if workers is not None else Config.CONCURRENT_REQUESTS
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        self.logger = logging.getLogger("enrichment.classifier")

    def classify(self, candidate: Candidate) -> ClassifiedCandidate:
        domain = candidate.domain
        try:
            if self.resolver.has_addresses(domain):
                tag = Classification.HAS_ADDRESSES
            elif self.resolver.is_registered(domain):
                tag = Classification.REGISTERED_NO_ADDRESSES
            else:
                tag = Classification.UNREGISTERED
        except ResolutionError as e:
            self.logger.debug(f"Lookup failed, treating as unregistered: {e}")
            return ClassifiedCandidate(candidate, Classification.UNREGISTERED, error=str(e))

        self.logger.debug(f"{domain}: {tag.value}")
        return ClassifiedCandidate(candidate, tag)

    def classify_all(self, candidates: Iterable[Candidate]) -> Iterator[ClassifiedCandidate]:
        """
        Classify a candidate stream with at most `workers` lookups in flight.

        The stream is pulled only when a slot frees up, so an unbounded or
        lazily generated input is never materialized. Results are yielded
        in completion order.
        """
        source = iter(candidates)
        checked = 0

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            pending: Dict[Future, Candidate] = {
                executor.submit(self.classify, candidate): candidate
                for candidate in islice(source, self.workers)
            }
            try:
                while pending:
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        pending.pop(future)
                        checked += 1
                        yield future.result()

                        for candidate in islice(source, 1):
                            pending[executor.submit(self.classify, candidate)] = candidate
            finally:
                # Consumer stopped early: drop lookups that have not started yet
                for future in pending:
                    future.cancel()
                self.logger.info(f"Classified {checked} candidates")
