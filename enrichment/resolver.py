import logging
from typing import List, Optional

import dns.exception
import dns.resolver
import whois
from whois.exceptions import WhoisDomainNotFoundError

from config.settings import Config
from utils.errors import ResolutionError
from utils.rate_limiter import RateLimiter


class DomainResolver:
    """
    Answer address and registration questions about a candidate domain.

    NXDOMAIN and empty answers are ordinary negatives. Timeouts, missing
    nameservers and socket failures raise ResolutionError so the caller
    can decide how to degrade.
    """

    ADDRESS_RECORD_TYPES = ('A', 'AAAA')

    def __init__(self,
                 timeout: Optional[float] = None,
                 lifetime: Optional[float] = None,
                 nameservers: Optional[List[str]] = None,
                 rate_limiter: Optional[RateLimiter] = None):
        self.logger = logging.getLogger("enrichment.resolver")
        nameservers = nameservers or Config.DNS_NAMESERVERS
        if nameservers:
            self.dns_resolver = dns.resolver.Resolver(configure=False)
            self.dns_resolver.nameservers = list(nameservers)
        else:
            self.dns_resolver = dns.resolver.Resolver()
        self.dns_resolver.timeout = timeout if timeout is not None else Config.DNS_TIMEOUT
        self.dns_resolver.lifetime = lifetime if lifetime is not None else Config.DNS_LIFETIME
        self.rate_limiter = rate_limiter or RateLimiter(
            calls=Config.WHOIS_RATE_CALLS,
            period=Config.WHOIS_RATE_PERIOD
        )

    def _has_records(self, domain: str, record_type: str) -> bool:
        try:
            answers = self.dns_resolver.resolve(domain, record_type)
            return len(answers) > 0
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return False
        except dns.exception.Timeout as e:
            raise ResolutionError(domain, f"{record_type} lookup timed out") from e
        except dns.exception.DNSException as e:
            raise ResolutionError(domain, f"{record_type} lookup failed: {e}") from e

    def has_addresses(self, domain: str) -> bool:
        """True if the domain has any A or AAAA record"""
        return any(self._has_records(domain, rtype) for rtype in self.ADDRESS_RECORD_TYPES)

    def is_registered(self, domain: str) -> bool:
        """
        True if the domain is delegated (has NS records) or WHOIS knows it.

        The NS check is cheap and covers most registered names; WHOIS is
        only consulted when DNS has no delegation for the domain.
        """
        if self._has_records(domain, 'NS'):
            return True
        return self._whois_registered(domain)

    def is_unregistered(self, domain: str) -> bool:
        return not self.is_registered(domain)

    def _whois_registered(self, domain: str) -> bool:
        try:
            with self.rate_limiter:
                w = whois.whois(domain)
        except WhoisDomainNotFoundError:
            return False
        except Exception as e:
            # quota exceeded, unparseable output, unknown TLD, network errors
            raise ResolutionError(domain, f"WHOIS lookup failed: {type(e).__name__}: {e}") from e

        registered = bool(getattr(w, 'domain_name', None))
        self.logger.debug(f"WHOIS {domain}: registered={registered}")
        return registered
