"""TRENDLINE — Engine error types."""


class NoDataError(Exception):
    """Raised when the engine has no usable daily rows to work from."""


class NoCurrentMonthDataError(NoDataError):
    """Raised when the month containing the as-of date has no rows.

    Without it there is no baseline for the monthly view, so the whole
    report is refused instead of returning an empty table.
    """

    def __init__(self, month_key: str):
        self.month_key = month_key
        super().__init__(f"No current month data found for {month_key}")
