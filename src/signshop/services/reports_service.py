"""
Reports Service - revenue, cost and margin figures over stored orders.

Reads the breakdown stored on each order; nothing here recomputes prices.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.models import OrderStatus, STATUS_LABELS, ServiceOrder
from .plans import PlanLimitError, is_feature_available

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    'id', 'client_id', 'client', 'name', 'status', 'created_at', 'due_date',
    'total_cost', 'sale_price', 'profit', 'margin_percent',
]


@dataclass
class DashboardMetrics:
    revenue_month: float = 0.0
    cost_month: float = 0.0
    profit_month: float = 0.0
    margin_month: float = 0.0
    orders_in_production: int = 0
    pending_quotes: int = 0


@dataclass
class PeriodSummary:
    revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    margin_percent: float = 0.0
    orders: int = 0


def _margin(revenue: float, profit: float) -> float:
    return round(profit / revenue * 100, 2) if revenue > 0 else 0.0


class ReportsService:
    """Aggregations over service orders using pandas."""

    def __init__(self, orders, catalog, plan: str = "free"):
        self.orders = orders
        self.catalog = catalog
        self.plan = plan

    def _client_names(self) -> dict[str, str]:
        return {row['id']: row.get('name', '') for row in self.catalog.store.all('clients')}

    def orders_frame(self, orders: Optional[list[ServiceOrder]] = None) -> pd.DataFrame:
        """One row per order with the stored breakdown figures."""
        orders = self.orders.all_orders() if orders is None else orders
        names = self._client_names()
        rows = [{
            'id': o.id,
            'client_id': o.client_id,
            'client': names.get(o.client_id, 'Client not found'),
            'name': o.name,
            'status': o.status.value,
            'created_at': o.created_at,
            'due_date': o.due_date,
            'total_cost': o.breakdown.total_cost,
            'sale_price': o.breakdown.sale_price,
            'profit': o.breakdown.profit,
            'margin_percent': o.breakdown.margin_percent,
        } for o in orders]

        df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
        df['created_at'] = pd.to_datetime(df['created_at'], format='ISO8601', errors='coerce')
        return df

    def _in_range(self, start: Optional[date] = None, end: Optional[date] = None) -> pd.DataFrame:
        df = self.orders_frame()
        if start is not None:
            df = df[df['created_at'] >= pd.Timestamp(start)]
        if end is not None:
            # Inclusive of the whole end day
            df = df[df['created_at'] < pd.Timestamp(end) + pd.Timedelta(days=1)]
        return df

    def dashboard_metrics(self, today: Optional[date] = None) -> DashboardMetrics:
        """This month's completed-order figures plus pipeline counts."""
        today = today or datetime.now().date()
        try:
            df = self.orders_frame()
        except (KeyError, ValueError, TypeError) as e:
            logger.error("Error building dashboard metrics: %s", e)
            return DashboardMetrics()

        this_month = df[
            (df['created_at'].dt.year == today.year) &
            (df['created_at'].dt.month == today.month)
        ]
        completed = this_month[this_month['status'] == OrderStatus.COMPLETED.value]

        revenue = round(float(completed['sale_price'].sum()), 2)
        cost = round(float(completed['total_cost'].sum()), 2)
        profit = round(revenue - cost, 2)

        return DashboardMetrics(
            revenue_month=revenue,
            cost_month=cost,
            profit_month=profit,
            margin_month=_margin(revenue, profit),
            orders_in_production=int((df['status'] == OrderStatus.PRODUCTION.value).sum()),
            pending_quotes=int((df['status'] == OrderStatus.QUOTE.value).sum()),
        )

    def summary(self, start: Optional[date] = None, end: Optional[date] = None) -> PeriodSummary:
        df = self._in_range(start, end)
        revenue = round(float(df['sale_price'].sum()), 2)
        cost = round(float(df['total_cost'].sum()), 2)
        profit = round(revenue - cost, 2)
        return PeriodSummary(
            revenue=revenue,
            cost=cost,
            profit=profit,
            margin_percent=_margin(revenue, profit),
            orders=len(df),
        )

    def revenue_by_month(self, start: Optional[date] = None, end: Optional[date] = None) -> dict[str, float]:
        df = self._in_range(start, end).dropna(subset=['created_at'])
        if df.empty:
            return {}
        grouped = df.groupby(df['created_at'].dt.strftime('%Y-%m'))['sale_price'].sum()
        return {month: round(float(value), 2) for month, value in grouped.sort_index().items()}

    def top_clients(self, limit: int = 5, start: Optional[date] = None, end: Optional[date] = None) -> list[dict]:
        df = self._in_range(start, end)
        if df.empty:
            return []
        grouped = df.groupby('client')['sale_price'].sum().sort_values(ascending=False).head(limit)
        return [{'name': name, 'revenue': round(float(value), 2)} for name, value in grouped.items()]

    def status_distribution(self, start: Optional[date] = None, end: Optional[date] = None) -> dict[str, int]:
        df = self._in_range(start, end)
        counts = df['status'].value_counts()
        return {status: int(count) for status, count in counts.items()}

    def export_frame(self, start: Optional[date] = None, end: Optional[date] = None, locale: str = "en") -> pd.DataFrame:
        """Report table with display columns, gated behind the reports feature."""
        if not is_feature_available('reports', self.plan):
            raise PlanLimitError("Report export is available on the Pro plan")

        df = self._in_range(start, end)
        labels = {s.value: STATUS_LABELS[s].get(locale, STATUS_LABELS[s]['en']) for s in OrderStatus}
        return pd.DataFrame({
            'Client': df['client'],
            'Service': df['name'],
            'Status': df['status'].map(labels),
            'Created': df['created_at'].dt.strftime('%Y-%m-%d'),
            'Due': df['due_date'].fillna('N/A'),
            'Cost': df['total_cost'],
            'Price': df['sale_price'],
            'Profit': df['profit'],
            'Margin (%)': df['margin_percent'],
        })

    def export_csv(self, start: Optional[date] = None, end: Optional[date] = None, locale: str = "en") -> str:
        return self.export_frame(start, end, locale).to_csv(index=False)

    def export_excel(self, path: Path, start: Optional[date] = None, end: Optional[date] = None, locale: str = "en") -> Path:
        path = Path(path)
        self.export_frame(start, end, locale).to_excel(path, index=False, sheet_name='Services', engine='openpyxl')
        logger.info("Exported service report to %s", path)
        return path
