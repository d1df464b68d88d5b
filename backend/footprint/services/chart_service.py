"""
Emission Chart Service

Generates PNG charts of weekly totals and the category breakdown.
"""

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
import numpy as np
from io import BytesIO
from datetime import datetime
from typing import Any, Dict, List, Sequence
import seaborn as sns

from footprint.services.category_service import CategoryAggregator
from footprint.services.insights_service import get_weekly_trend_data
from footprint.services.trend_service import TrendDetector


class EmissionChartService:
    """Service for generating emission visualization charts."""

    @staticmethod
    def _to_png(fig) -> bytes:
        buffer = BytesIO()
        plt.savefig(buffer, format='png', dpi=100, bbox_inches='tight')
        buffer.seek(0)
        plt.close(fig)
        return buffer.getvalue()

    @staticmethod
    def generate_weekly_chart(records: Sequence[Any], now: datetime, weeks: int = 12) -> bytes:
        """
        Bar chart of weekly totals with the fitted regression line.

        Args:
            records: Emission records for one user
            now: Reference time for the last week shown
            weeks: Number of calendar weeks to plot

        Returns:
            PNG image as bytes
        """
        if not records:
            return EmissionChartService._generate_no_data_chart(
                "No emissions logged yet"
            )

        weekly_data: List[Dict[str, Any]] = get_weekly_trend_data(records, now, weeks)
        totals = [week['total'] for week in weekly_data]
        labels = [week['start_date'].strftime('%d %b') for week in weekly_data]
        trend = TrendDetector.detect_trend(totals)

        fig, ax = plt.subplots(figsize=(12, 6))
        x_positions = np.arange(1, len(totals) + 1)
        ax.bar(x_positions, totals, color='#4CAF50', alpha=0.8, label='Weekly total')

        if trend['trend'] != 'insufficient_data':
            fitted = trend['intercept'] + trend['slope'] * x_positions
            ax.plot(x_positions, fitted, color='#F44336', linewidth=2,
                    linestyle='--', label=f"Trend ({trend['trend']})")

        ax.set_xticks(x_positions)
        ax.set_xticklabels(labels, rotation=45, ha='right')
        ax.set_ylabel('kg CO₂e')
        ax.set_title('Weekly Emissions', fontsize=14, fontweight='bold')
        ax.legend(loc='upper left')
        ax.grid(axis='y', alpha=0.3)

        return EmissionChartService._to_png(fig)

    @staticmethod
    def generate_category_chart(records: Sequence[Any]) -> bytes:
        """Horizontal bar chart of totals per category, largest first."""
        breakdown = CategoryAggregator.get_category_breakdown(records)
        if not breakdown:
            return EmissionChartService._generate_no_data_chart(
                "No emissions logged yet"
            )

        categories = [item['category'] for item in breakdown]
        totals = [item['total'] for item in breakdown]

        fig, ax = plt.subplots(figsize=(10, 6))
        sns.barplot(x=totals, y=categories, hue=categories, palette='viridis',
                    legend=False, ax=ax, orient='h')

        for index, item in enumerate(breakdown):
            ax.text(item['total'], index, f"  {item['percentage']:.1f}%",
                    va='center', fontsize=10)

        ax.set_xlabel('kg CO₂e')
        ax.set_ylabel('')
        ax.set_title('Emissions by Category', fontsize=14, fontweight='bold')
        sns.despine(ax=ax)

        return EmissionChartService._to_png(fig)

    @staticmethod
    def _generate_no_data_chart(message: str) -> bytes:
        """Generate a placeholder chart when no data is available."""
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.text(0.5, 0.5, message,
                horizontalalignment='center',
                verticalalignment='center',
                fontsize=14, color='gray',
                transform=ax.transAxes)
        ax.axis('off')

        return EmissionChartService._to_png(fig)
