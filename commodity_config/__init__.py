"""
commodity_config -- public entrypoint for trade-term configuration.

Responsibility:
    Provides the runtime way to obtain the trade-term regime effective on a
    date (``get_active_term``) and named payment-term profiles
    (``get_payment_terms``).  YAML parsing lives in ``loader`` and is never
    needed by callers.

Architecture position:
    Configuration -- sits above ``commodity_kernel`` and beside the
    engines.  The kernel and the engines MUST NEVER import from
    ``commodity_config``; callers pass the returned snapshots into the
    engines explicitly.

Failure modes:
    - ``TermNotFoundError`` -- no regime effective on the requested date.
    - ``PaymentTermsNotFoundError`` -- unknown profile name.
    - ``InvalidTermConfigurationError`` -- a regime in the file breaks a
      term invariant.
    - ``FileNotFoundError`` / ``yaml.YAMLError`` -- unreadable file.

Audit relevance:
    Every successful ``get_active_term()`` call emits a
    ``COMMODITY_CONFIG_TRACE`` log entry containing the term id, version,
    effective window and file checksum, tying each computed charge to the
    exact configuration that governed it.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from commodity_config.loader import TermSet, compute_checksum, load_term_set
from commodity_kernel.domain.terms import (
    PaymentTerms,
    TradeTermConfiguration,
    select_active_term,
)
from commodity_kernel.domain.values import DateLike, coerce_date
from commodity_kernel.exceptions import TermNotFoundError
from commodity_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "cci_terms.yaml"

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "TermSet",
    "compute_checksum",
    "get_active_term",
    "get_payment_terms",
    "load_term_set",
]


def get_active_term(
    as_of_date: DateLike,
    config_path: Path | None = None,
) -> TradeTermConfiguration:
    """Return the regime effective on ``as_of_date``.

    Guarantees:
        - When several windows contain the date the most recently
          effective regime is returned.
        - A ``COMMODITY_CONFIG_TRACE`` log entry is emitted on success.
    """
    day: date = coerce_date("as_of_date", as_of_date)
    term_set = load_term_set(config_path or DEFAULT_CONFIG_PATH)
    term = select_active_term(term_set.terms, day)
    if term is None:
        _logger.warning("trade_term_not_found", extra={
            "as_of_date": day.isoformat(),
            "source": term_set.source,
            "term_count": len(term_set.terms),
        })
        raise TermNotFoundError(day.isoformat())

    _logger.info(
        "COMMODITY_CONFIG_TRACE",
        extra={
            "trace_type": "COMMODITY_CONFIG_TRACE",
            "as_of_date": day.isoformat(),
            "term_id": term.term_id,
            "term_name": term.name,
            "term_version": term.version,
            "effective_from": term.effective_from.isoformat(),
            "effective_to": term.effective_to.isoformat() if term.effective_to else None,
            "checksum": term_set.checksum,
        },
    )
    return term


def get_payment_terms(name: str, config_path: Path | None = None) -> PaymentTerms:
    """Return the named payment-term profile."""
    return load_term_set(config_path or DEFAULT_CONFIG_PATH).payment_profile(name)
