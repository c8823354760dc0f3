#!/usr/bin/env python3
import logging
import sys
from itertools import islice
from typing import Dict, Optional

import click

from config.settings import Config
from enrichment.classifier import Classification, Classifier
from enrichment.resolver import DomainResolver
from generators.strategies import StrategyConfig
from generators.typosquat import TyposquatGenerator
from utils.errors import ConfigError, MalformedDomain
from utils.validators import parse_domain

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger("typosquat")


def setup_logging(verbose: int = 0):
    """Log to stderr (stdout carries results), plus LOG_FILE when configured"""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, Config.LOG_LEVEL.upper(), logging.WARNING)

    handlers = [logging.StreamHandler(sys.stderr)]
    if Config.LOG_FILE:
        handlers.append(logging.FileHandler(Config.LOG_FILE))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def build_generator(omit_chars, repeat_chars, swap_chars, change_suffix,
                    tables_path=None) -> TyposquatGenerator:
    """Build a generator from the CLI toggles (each flag flips its default)"""
    config = StrategyConfig().toggled(
        omit_chars=omit_chars,
        repeat_chars=repeat_chars,
        swap_chars=swap_chars,
        change_suffix=change_suffix,
    )
    tables = Config.load_typo_tables(tables_path) if tables_path else {}
    return TyposquatGenerator(config, **tables)


def wanted_classifications(has_addresses, registered, unregistered):
    """Classifications selected by the filter flags; None means print everything"""
    wanted = set()
    if has_addresses:
        wanted.add(Classification.HAS_ADDRESSES)
    if registered:
        wanted.update(c for c in Classification if c.is_registered)
    if unregistered:
        wanted.add(Classification.UNREGISTERED)
    return wanted or None


def strategy_options(f):
    """Shared strategy toggle options"""
    options = [
        click.option('--omit-chars', is_flag=True, help='Toggles whether to omit repeated characters'),
        click.option('--repeat-chars', is_flag=True, help='Toggles whether to repeat single characters'),
        click.option('--swap-chars', is_flag=True, help='Toggles whether to swap certain common character pairs'),
        click.option('--tables', 'tables_path', type=click.Path(exists=True, dir_okay=False),
                     help='YAML file overriding the swap pair / alternate suffix tables'),
    ]
    for option in reversed(options):
        f = option(f)
    return f


# --- CLI COMMANDS ---

@click.command()
@click.argument('domain')
@strategy_options
@click.option('--change-suffix', is_flag=True, help='Toggles whether to change the suffix of domains')
@click.option('-A', '--has-addresses', is_flag=True, help='Print typo squat domains with addresses')
@click.option('-r', '--registered', is_flag=True, help='Print typo squat domains that are already registered')
@click.option('-u', '--unregistered', is_flag=True, help='Print typo squat domains that can be registered')
@click.option('--limit', type=click.IntRange(min=1), default=None, help='Stop after this many candidates')
@click.option('--workers', type=click.IntRange(min=1), default=None,
              help=f'Concurrent lookups (default {Config.CONCURRENT_REQUESTS})')
@click.option('--show-strategy', is_flag=True, help='Print the strategy that produced each domain')
@click.pass_context
def typosquat(ctx, domain, omit_chars, repeat_chars, swap_chars, tables_path, change_suffix,
              has_addresses, registered, unregistered, limit, workers, show_strategy):
    """
    Finds typo squatted domains.

    All strategies are enabled by default; each strategy flag toggles one off.
    Without -A/-r/-u every candidate is printed and no lookups are made.
    """
    try:
        target = parse_domain(domain)
    except MalformedDomain as e:
        raise click.BadParameter(str(e), ctx=ctx, param_hint='DOMAIN')

    try:
        generator = build_generator(omit_chars, repeat_chars, swap_chars, change_suffix, tables_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    candidates = iter(generator.candidates(target))
    if limit:
        candidates = islice(candidates, limit)

    wanted = wanted_classifications(has_addresses, registered, unregistered)
    if wanted is None:
        for candidate in candidates:
            _echo(candidate.domain, candidate.strategy, show_strategy)
        return

    logger.info(f"Classifying candidates for {target} ({', '.join(sorted(w.value for w in wanted))})")
    classifier = Classifier(DomainResolver(), workers=workers)
    for result in classifier.classify_all(candidates):
        if result.classification in wanted:
            _echo(result.domain, result.candidate.strategy, show_strategy)


@click.command()
@click.argument('word')
@strategy_options
@click.option('--show-strategy', is_flag=True, help='Print the strategy that produced each word')
def typo(word, omit_chars, repeat_chars, swap_chars, tables_path, show_strategy):
    """Generates typos of a single word."""
    try:
        generator = build_generator(omit_chars, repeat_chars, swap_chars, False, tables_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    word = word.strip().lower()
    if not word:
        raise click.BadParameter("word must not be empty", param_hint='WORD')

    for variant, strategy in generator.word_variants(word):
        _echo(variant, strategy, show_strategy)


def _echo(value, strategy, show_strategy):
    click.echo(f"{value}\t{strategy}" if show_strategy else value)


COMMANDS = {
    'typosquat': typosquat,
    'typo': typo,
}


def build_cli(commands: Dict[str, click.Command]) -> click.Group:
    """Build the top-level group from an explicit name -> command mapping"""

    @click.group()
    @click.option('-v', '--verbose', count=True, help='Increase log verbosity (-v info, -vv debug)')
    def cli(verbose):
        """Typosquat Finder - generate and classify typo squatted domains"""
        setup_logging(verbose)

    for name, command in commands.items():
        cli.add_command(command, name=name)
    return cli


cli = build_cli(COMMANDS)


def main(argv: Optional[list] = None):
    cli.main(args=argv, prog_name='typosquat-finder')


if __name__ == '__main__':
    main()
