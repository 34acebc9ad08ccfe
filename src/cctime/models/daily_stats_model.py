"""QAbstractListModel over the daily buckets of a report."""

from PySide6.QtCore import QAbstractListModel, QModelIndex, Qt

from cctime.types.metrics import DailyBucket, MetricsReport
from cctime.utils.formatting import format_duration

_SORT_KEYS = {
    "date": lambda b: b.date,
    "totalTime": lambda b: b.total_latency_ms,
    "avgTime": lambda b: b.mean_latency_ms,
    "count": lambda b: b.count,
}


class DailyStatsModel(QAbstractListModel):
    """Exposes one row per day to a display layer."""

    DateRole = Qt.UserRole + 1
    TotalLatencyRole = Qt.UserRole + 2
    AverageLatencyRole = Qt.UserRole + 3
    ResponseCountRole = Qt.UserRole + 4
    SessionCountRole = Qt.UserRole + 5
    P50Role = Qt.UserRole + 6
    P90Role = Qt.UserRole + 7
    P99Role = Qt.UserRole + 8

    def __init__(self, parent=None):
        super().__init__(parent)
        self._buckets: list[DailyBucket] = []
        self._sort_key = "date"
        self._descending = True

    def roleNames(self):
        return {
            self.DateRole: b"date",
            self.TotalLatencyRole: b"totalLatency",
            self.AverageLatencyRole: b"averageLatency",
            self.ResponseCountRole: b"responseCount",
            self.SessionCountRole: b"sessionCount",
            self.P50Role: b"p50",
            self.P90Role: b"p90",
            self.P99Role: b"p99",
        }

    def rowCount(self, parent=QModelIndex()):
        return len(self._buckets)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid() or index.row() >= len(self._buckets):
            return None

        bucket = self._buckets[index.row()]

        if role == self.DateRole:
            return bucket.date
        elif role == self.TotalLatencyRole:
            return bucket.total_latency_ms
        elif role == self.AverageLatencyRole:
            return bucket.mean_latency_ms
        elif role == self.ResponseCountRole:
            return bucket.count
        elif role == self.SessionCountRole:
            return len(bucket.session_ids)
        elif role == self.P50Role:
            return bucket.percentiles.p50
        elif role == self.P90Role:
            return bucket.percentiles.p90
        elif role == self.P99Role:
            return bucket.percentiles.p99
        elif role == Qt.DisplayRole:
            return f"{bucket.date}  {format_duration(bucket.mean_latency_ms)} avg"
        return None

    def set_report(self, report: MetricsReport):
        """Replace all rows with the report's daily buckets."""
        self.beginResetModel()
        self._buckets = list(report.daily.values())
        self._apply_sort()
        self.endResetModel()

    def sort_by(self, key: str, descending: bool = True):
        if key not in _SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        self.beginResetModel()
        self._sort_key = key
        self._descending = descending
        self._apply_sort()
        self.endResetModel()

    def get_date(self, row: int) -> str:
        if 0 <= row < len(self._buckets):
            return self._buckets[row].date
        return ""

    def _apply_sort(self):
        self._buckets.sort(key=_SORT_KEYS[self._sort_key], reverse=self._descending)
