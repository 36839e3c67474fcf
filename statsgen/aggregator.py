"""Reshape per-chain datastore counts into the published stats layout."""
from typing import Sequence

from statsgen.models import ChainContractCount, StatsReport


def generate_stats(contracts_per_chain: Sequence[ChainContractCount]) -> StatsReport:
    """
    Build the stats report from per-chain counts.

    The counting already happened in the datastore; this only maps each
    chain id to its full/partial match counts. Keys come out in ascending
    chain id order. An empty input gives an empty report.

    Args:
        contracts_per_chain: One entry per chain with at least one match

    Returns:
        Mapping of chain id to {"full_match": ..., "partial_match": ...}
    """
    stats: StatsReport = {}
    for chain in sorted(contracts_per_chain, key=lambda c: c.chain_id):
        stats[chain.chain_id] = {
            "full_match": chain.full,
            "partial_match": chain.partial,
        }
    return stats
