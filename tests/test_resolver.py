import dns.exception
import dns.resolver
import pytest
from whois.exceptions import (
    FailedParsingWhoisOutputError,
    WhoisDomainNotFoundError,
    WhoisQuotaExceededError,
)

import enrichment.resolver as resolver_module
from enrichment.classifier import Classification, Classifier
from enrichment.resolver import DomainResolver
from generators.strategies import StrategyConfig
from generators.typosquat import TyposquatGenerator
from utils.errors import ResolutionError
from utils.rate_limiter import RateLimiter
from utils.validators import DomainName


class FakeDNS:
    """Stand-in for Resolver.resolve: answers from a table, NXDOMAIN otherwise"""

    def __init__(self, records):
        self.records = records
        self.queries = []

    def __call__(self, domain, record_type):
        self.queries.append((domain, record_type))
        answer = self.records.get((domain, record_type), dns.resolver.NXDOMAIN)
        if isinstance(answer, type) and issubclass(answer, Exception):
            raise answer()
        return answer


class FakeWhoisResult:
    def __init__(self, domain_name):
        self.domain_name = domain_name


@pytest.fixture
def resolver():
    return DomainResolver(timeout=1, lifetime=1, nameservers=["127.0.0.1"],
                          rate_limiter=RateLimiter(calls=100, period=1))


@pytest.fixture
def no_whois(monkeypatch):
    def fail(domain):
        raise AssertionError(f"unexpected WHOIS lookup for {domain}")
    monkeypatch.setattr(resolver_module.whois, "whois", fail)


def use_dns(monkeypatch, resolver, records):
    fake = FakeDNS(records)
    monkeypatch.setattr(resolver.dns_resolver, "resolve", fake)
    return fake


def test_explicit_nameservers(resolver):
    assert resolver.dns_resolver.nameservers == ["127.0.0.1"]
    assert resolver.dns_resolver.lifetime == 1


class TestHasAddresses:
    def test_a_record(self, monkeypatch, resolver):
        use_dns(monkeypatch, resolver, {("example.com", "A"): ["93.184.216.34"]})
        assert resolver.has_addresses("example.com")

    def test_aaaa_only(self, monkeypatch, resolver):
        fake = use_dns(monkeypatch, resolver, {
            ("example.com", "A"): dns.resolver.NoAnswer,
            ("example.com", "AAAA"): ["2606:2800:220:1::"],
        })
        assert resolver.has_addresses("example.com")
        assert fake.queries == [("example.com", "A"), ("example.com", "AAAA")]

    def test_nxdomain(self, monkeypatch, resolver):
        use_dns(monkeypatch, resolver, {})
        assert not resolver.has_addresses("nope.com")

    @pytest.mark.parametrize("error", [dns.exception.Timeout, dns.resolver.NoNameservers])
    def test_failures_raise_resolution_error(self, monkeypatch, resolver, error):
        use_dns(monkeypatch, resolver, {("slow.com", "A"): error})
        with pytest.raises(ResolutionError) as excinfo:
            resolver.has_addresses("slow.com")
        assert excinfo.value.domain == "slow.com"


class TestIsRegistered:
    def test_delegated(self, monkeypatch, resolver, no_whois):
        use_dns(monkeypatch, resolver, {("example.com", "NS"): ["a.iana-servers.net."]})
        assert resolver.is_registered("example.com")
        assert not resolver.is_unregistered("example.com")

    def test_whois_fallback_registered(self, monkeypatch, resolver):
        use_dns(monkeypatch, resolver, {})
        monkeypatch.setattr(resolver_module.whois, "whois", lambda d: FakeWhoisResult("PARKED.COM"))
        assert resolver.is_registered("parked.com")

    def test_whois_no_match(self, monkeypatch, resolver):
        use_dns(monkeypatch, resolver, {})

        def no_match(domain):
            raise WhoisDomainNotFoundError(f'No match for "{domain.upper()}".')

        monkeypatch.setattr(resolver_module.whois, "whois", no_match)
        assert not resolver.is_registered("free-domain.com")
        assert resolver.is_unregistered("free-domain.com")

    def test_whois_empty_record(self, monkeypatch, resolver):
        use_dns(monkeypatch, resolver, {})
        monkeypatch.setattr(resolver_module.whois, "whois", lambda d: FakeWhoisResult(None))
        assert not resolver.is_registered("free-domain.com")

    def test_whois_network_error(self, monkeypatch, resolver):
        use_dns(monkeypatch, resolver, {})

        def refused(domain):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(resolver_module.whois, "whois", refused)
        with pytest.raises(ResolutionError):
            resolver.is_registered("example.org")

    def test_ns_timeout(self, monkeypatch, resolver, no_whois):
        use_dns(monkeypatch, resolver, {("example.com", "NS"): dns.exception.Timeout})
        with pytest.raises(ResolutionError):
            resolver.is_unregistered("example.com")

    @pytest.mark.parametrize("error", [
        WhoisQuotaExceededError("quota exceeded"),
        FailedParsingWhoisOutputError("unparseable"),
        KeyError("registrar"),
    ])
    def test_whois_failures_are_not_negatives(self, monkeypatch, resolver, error):
        use_dns(monkeypatch, resolver, {})

        def broken(domain):
            raise error

        monkeypatch.setattr(resolver_module.whois, "whois", broken)
        with pytest.raises(ResolutionError) as excinfo:
            resolver.is_registered("example.org")
        assert type(error).__name__ in str(excinfo.value)


def test_whois_crash_does_not_stop_classification(monkeypatch, resolver):
    use_dns(monkeypatch, resolver, {})

    def whois_lookup(domain):
        if domain == "aabc.com":
            raise KeyError("registrar")
        raise WhoisDomainNotFoundError(f'No match for "{domain.upper()}".')

    monkeypatch.setattr(resolver_module.whois, "whois", whois_lookup)
    stream = TyposquatGenerator(StrategyConfig(False, True, False, False)).candidates(
        DomainName("abc", ".com")
    )

    results = {r.domain: r for r in Classifier(resolver, workers=2).classify_all(stream)}

    assert sorted(results) == ["aabc.com", "abbc.com", "abcc.com"]
    assert all(r.classification is Classification.UNREGISTERED for r in results.values())
    assert "KeyError" in results["aabc.com"].error
    assert results["abbc.com"].error is None
