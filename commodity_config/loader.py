"""
Configuration Loader (``commodity_config.loader``).

Responsibility
--------------
Loads a YAML term-set file and parses it into typed
``commodity_kernel.domain.terms`` dataclass instances.  Runtime callers
use ``commodity_config.get_active_term()`` / ``get_payment_terms()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from the kernel domain, so the
  term invariants (tier ordering, moisture band, non-negative rates) are
  checked on load.
* Numeric values are read as strings where given, so ``"1.35"`` becomes
  ``Decimal("1.35")`` exactly.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invariant violations  -> ``InvalidTermConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import MISSING, dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from commodity_kernel.domain.terms import PaymentTerms, TradeTermConfiguration
from commodity_kernel.exceptions import PaymentTermsNotFoundError

_TERM_FIELDS = frozenset(f.name for f in fields(TradeTermConfiguration))


@dataclass(frozen=True)
class TermSet:
    """All regimes and payment profiles from one configuration file."""

    terms: tuple[TradeTermConfiguration, ...]
    payment_terms: Mapping[str, PaymentTerms]
    checksum: str
    source: str

    def payment_profile(self, name: str) -> PaymentTerms:
        try:
            return self.payment_terms[name]
        except KeyError:
            raise PaymentTermsNotFoundError(name) from None


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_term(data: dict[str, Any]) -> TradeTermConfiguration:
    """
    Parse a ``TradeTermConfiguration`` from a dict.

    Unknown keys are ignored so that UI-only settings (email templates and
    similar) can live in the same file.

    Raises:
        KeyError: if a required engine field is missing.
        InvalidTermConfigurationError: if the values break an invariant.
    """
    kwargs = {k: v for k, v in data.items() if k in _TERM_FIELDS}
    missing = [
        f.name for f in fields(TradeTermConfiguration)
        if f.name not in kwargs and f.default is MISSING and f.default_factory is MISSING
    ]
    if missing:
        raise KeyError(f"Trade term {data.get('name', '?')!r} missing fields: {missing}")
    return TradeTermConfiguration(**kwargs)


def parse_payment_terms(data: dict[str, Any]) -> PaymentTerms:
    """Parse ``PaymentTerms`` from a dict."""
    return PaymentTerms(
        payment_days=data["payment_days"],
        grace_period_days=data["grace_period_days"],
        interest_rate_per_annum=data["interest_rate_per_annum"],
        compounding_frequency=data.get("compounding_frequency", "monthly"),
        late_fee_flat=data.get("late_fee_flat"),
        charge_interest=data.get("charge_interest", True),
    )


def compute_checksum(data: Any) -> str:
    """Deterministic SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_term_set(path: Path) -> TermSet:
    """Load and parse every regime and payment profile in ``path``."""
    raw = load_yaml_file(path)
    terms = tuple(parse_term(item) for item in raw.get("terms", []))
    payment_terms = {
        name: parse_payment_terms(item)
        for name, item in (raw.get("payment_terms") or {}).items()
    }
    return TermSet(
        terms=terms,
        payment_terms=payment_terms,
        checksum=compute_checksum(raw),
        source=str(path),
    )
