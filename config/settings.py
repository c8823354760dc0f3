import os
from pathlib import Path
from typing import Dict, List, Tuple, Union
import yaml
from dotenv import load_dotenv

from utils.errors import ConfigError
from utils.validators import is_valid_name

load_dotenv()

class Config:
    # Project Paths
    BASE_DIR = Path(__file__).parent.parent
    CONFIG_DIR = BASE_DIR / "config"

    # DNS
    DNS_TIMEOUT = float(os.getenv("DNS_TIMEOUT", "5"))
    DNS_LIFETIME = float(os.getenv("DNS_LIFETIME", "5"))
    DNS_NAMESERVERS = [ns.strip() for ns in os.getenv("DNS_NAMESERVERS", "").split(",") if ns.strip()]

    # Classification fan-out
    CONCURRENT_REQUESTS = int(os.getenv("CONCURRENT_REQUESTS", "10"))

    # WHOIS rate limiting (calls per period seconds)
    WHOIS_RATE_CALLS = int(os.getenv("WHOIS_RATE_CALLS", "10"))
    WHOIS_RATE_PERIOD = float(os.getenv("WHOIS_RATE_PERIOD", "60"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
    LOG_FILE = os.getenv("LOG_FILE")

    @classmethod
    def load_typo_tables(cls, path: Union[str, Path]) -> Dict:
        """
        Load swap pair / alternate suffix overrides from YAML.

        Both keys are optional; a missing key keeps the built-in table.
        Returned keys are `swap_pairs` (tuple of 2-tuples) and
        `alternate_suffixes` (tuple of dotted suffixes).
        """
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read typo tables from {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level")

        tables = {}
        if 'swap_pairs' in data:
            tables['swap_pairs'] = cls._parse_swap_pairs(data['swap_pairs'], path)
        if 'alternate_suffixes' in data:
            tables['alternate_suffixes'] = cls._parse_suffixes(data['alternate_suffixes'], path)
        return tables

    @staticmethod
    def _parse_swap_pairs(value, path) -> Tuple[Tuple[str, str], ...]:
        if not isinstance(value, list):
            raise ConfigError(f"{path}: swap_pairs must be a list")

        pairs: List[Tuple[str, str]] = []
        for entry in value:
            if (not isinstance(entry, list) or len(entry) != 2
                    or not all(isinstance(s, str) and s for s in entry)):
                raise ConfigError(f"{path}: invalid swap pair {entry!r}")
            pair, swapped = (s.lower() for s in entry)
            pairs.append((pair, swapped))
        return tuple(pairs)

    @staticmethod
    def _parse_suffixes(value, path) -> Tuple[str, ...]:
        if not isinstance(value, list):
            raise ConfigError(f"{path}: alternate_suffixes must be a list")

        suffixes = []
        for entry in value:
            if not isinstance(entry, str) or not entry.strip('. '):
                raise ConfigError(f"{path}: invalid suffix {entry!r}")
            suffix = entry.strip().lower().lstrip('.')
            if not is_valid_name(suffix):
                raise ConfigError(f"{path}: invalid suffix {entry!r}")
            suffixes.append('.' + suffix)
        return tuple(suffixes)
