import re
from dataclasses import dataclass
from urllib.parse import urlparse

import tldextract

from utils.errors import MalformedDomain

# Hostname label: 1-63 chars, letters/digits/hyphen, no leading or trailing hyphen
LABEL_REGEX = re.compile(r'^(?!-)[a-z0-9-]{1,63}(?<!-)$')

# Offline extractor: uses the public suffix snapshot bundled with tldextract
_extractor = tldextract.TLDExtract(suffix_list_urls=())


@dataclass(frozen=True)
class DomainName:
    """A domain split into its registrable name and public suffix"""
    name: str
    suffix: str

    def __str__(self) -> str:
        return f"{self.name}{self.suffix}"


def extract_domain_from_url(url: str) -> str:
    """Extracts the host from a URL string, or returns the input unchanged."""
    if '://' not in url:
        return url.split('/')[0].split(':')[0]

    parsed = urlparse(url)
    return parsed.hostname or ''


def normalize_domain(domain: str) -> str:
    """Normalizes a domain string (lowercase, stripped, no trailing dot)."""
    if not domain:
        return ""
    return domain.strip().lower().rstrip('.')


def is_valid_label(label: str) -> bool:
    return bool(LABEL_REGEX.match(label))


def is_valid_name(name: str) -> bool:
    """Checks that every dot-separated label of a name is a valid hostname label."""
    if not name or len(name) > 253:
        return False
    return all(is_valid_label(label) for label in name.split('.'))


def is_valid_domain(domain: str, suffix: str) -> bool:
    """Checks a full candidate domain whose public suffix is already known."""
    if not suffix or not domain.endswith(suffix):
        return False
    return is_valid_name(domain[:-len(suffix)])


def parse_domain(raw: str) -> DomainName:
    """
    Split a raw domain (or URL) into name and public suffix.

    The name keeps any subdomain labels, so ``www.example.co.uk`` parses
    to ``DomainName('www.example', '.co.uk')``.

    Raises:
        MalformedDomain: no public suffix, empty name or an invalid label
    """
    domain = normalize_domain(extract_domain_from_url(normalize_domain(raw)))
    if not domain:
        raise MalformedDomain(raw, "empty domain")

    extracted = _extractor(domain)
    if not extracted.suffix:
        raise MalformedDomain(raw, "no recognizable public suffix")
    if not extracted.domain:
        raise MalformedDomain(raw, "no name before the public suffix")

    name = '.'.join(part for part in (extracted.subdomain, extracted.domain) if part)
    if not is_valid_name(name):
        raise MalformedDomain(raw, f"invalid name {name!r}")

    return DomainName(name=name, suffix=f".{extracted.suffix}")
