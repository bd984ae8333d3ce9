"""Analytics module for ranking a producer among the active producers."""

import math
import pandas as pd
from typing import List
from .types import EMPTY_STATISTICS, Producer, ProducerStatistics
from .constants import STATUS_NOT_FOUND, STATUS_OK, VOTE_WEIGHT_DIVISOR
import logging

logger = logging.getLogger('vote4us.analytics')


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


def format_percentage(part: float, total: float) -> str:
    """Format ``part`` as a share of ``total`` with two decimals, e.g. '33.33%'."""
    if total <= 0:
        return '0.00%'
    return f"{part / total * 100:.2f}%"


class ProducerAnalytics:
    """Class for computing producer statistics."""

    @staticmethod
    def producers_frame(producers: List[Producer]) -> pd.DataFrame:
        """Build a frame of owners and numeric vote weights in ranking order.

        Producers flagged inactive are left out.

        Args:
            producers: Producers, as returned by the data fetcher

        Returns:
            DataFrame with ``owner`` and ``weight`` columns, highest weight first
        """
        df = pd.DataFrame(producers, columns=['owner', 'total_votes', 'is_active'])
        active = df['is_active'].map(lambda flag: True if pd.isna(flag) else bool(int(flag))).astype(bool)
        df = df[active].copy()
        df['weight'] = pd.to_numeric(df['total_votes'], errors='coerce').fillna(0.0)
        df = df.sort_values('weight', ascending=False, kind='stable').reset_index(drop=True)
        return df[['owner', 'weight']]

    @staticmethod
    def compute_statistics(producers: List[Producer], target_owner: str) -> ProducerStatistics:
        """Compute the rank and vote share of one producer.

        Args:
            producers: Active producers
            target_owner: Account of the producer to rank

        Returns:
            ProducerStatistics for the target. When there are no producers,
            or the target is not among them, the numbers are zero and
            ``status`` says which case it was.
        """
        if not producers:
            logger.warning("No producers to compute statistics from")
            return EMPTY_STATISTICS

        df = ProducerAnalytics.producers_frame(producers)
        if df.empty:
            logger.warning("No active producers to compute statistics from")
            return EMPTY_STATISTICS
        total_weight = float(df['weight'].sum())

        matches = df.index[df['owner'] == target_owner]
        if len(matches) == 0:
            logger.error(f"{target_owner} not found among {len(df)} producers.")
            return ProducerStatistics(status=STATUS_NOT_FOUND)

        position = int(matches[0])
        weight = float(df.at[position, 'weight'])

        return ProducerStatistics(
            rank=position + 1,
            votes=round_half_up(weight / VOTE_WEIGHT_DIVISOR),
            total_votes=round_half_up(total_weight),
            percentage=format_percentage(weight, total_weight),
            list=tuple(df['owner'].tolist()),
            status=STATUS_OK
        )
