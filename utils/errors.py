class TyposquatError(Exception):
    """Base class for all typosquat finder errors"""


class MalformedDomain(TyposquatError, ValueError):
    """The input could not be split into a name and a public suffix"""

    def __init__(self, domain: str, reason: str):
        self.domain = domain
        self.reason = reason
        super().__init__(f"malformed domain {domain!r}: {reason}")


class StrategyInputError(TyposquatError, ValueError):
    """A mutation strategy was handed an empty name"""


class ResolutionError(TyposquatError):
    """A single DNS or WHOIS lookup failed or timed out"""

    def __init__(self, domain: str, message: str):
        self.domain = domain
        super().__init__(f"{domain}: {message}")


class ConfigError(TyposquatError):
    """A typo tables file could not be loaded"""
