"""Quorum utilities for organization governance.

This package provides helpers for weighted quorum evaluation over token
balances. Utilities are side-effect free and easy to test.
"""

from __future__ import annotations

from quorumdao.consensus.weighted_quorum import (
    has_weighted_quorum,
    meets_quorum,
    required_weight,
    signer_weight,
)

__all__ = ["has_weighted_quorum", "meets_quorum", "required_weight", "signer_weight"]
