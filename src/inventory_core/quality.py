"""
Data quality checks for raw venue rows.

The engine never aborts on a bad row: missing quantities count as zero and
unparseable timestamps as absent. These checks make that degradation visible,
so a venue can see how much of a snapshot was coerced before trusting it.
"""

from dataclasses import dataclass, field
from typing import Callable, Any
import pandas as pd

from .parsers import TimestampParser


@dataclass
class DataQualityIssue:
    """A single data quality issue found in the data."""

    column: str
    issue_type: str  # e.g., "missing", "invalid_value", "non_numeric", "rejected"
    severity: str  # "critical", "warning", "info"
    count: int
    percentage: float
    sample_values: list[Any] = field(default_factory=list)
    description: str = ""


@dataclass
class DataQualityReport:
    """Summary report of data quality for a single data source."""

    source_name: str
    total_rows: int
    issues: list[DataQualityIssue] = field(default_factory=list)

    @property
    def critical_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "critical"]

    @property
    def warning_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def has_critical_issues(self) -> bool:
        return len(self.critical_issues) > 0

    def summary(self) -> dict:
        return {
            "source": self.source_name,
            "total_rows": self.total_rows,
            "critical": len(self.critical_issues),
            "warnings": len(self.warning_issues),
            "info": len([i for i in self.issues if i.severity == "info"]),
        }


def _severity_for(pct: float) -> str:
    return "critical" if pct > 20 else "warning" if pct > 5 else "info"


class DataQualityChecker:
    """
    Quality checker for one raw input collection.

    Checks registered by default:
    - Missing values in the required columns

    Add more with the check_* builders or add_check(). Builders return self:

        checker = (
            DataQualityChecker("Stock Movements", required_columns=["id", "qty"])
            .check_invalid_values("movement_type", {"purchase", "sale"})
            .check_non_numeric("qty")
        )
        report = checker.run(df)
    """

    def __init__(self, source_name: str, required_columns: list[str] | None = None):
        self.source_name = source_name
        self.required_columns = required_columns or []
        self._checks: list[Callable[[pd.DataFrame], list[DataQualityIssue]]] = []
        self._extra_issues: list[DataQualityIssue] = []
        self.add_check(self._check_missing_values)

    def add_check(
        self, check_fn: Callable[[pd.DataFrame], list[DataQualityIssue]]
    ) -> "DataQualityChecker":
        """Add a custom check function. Returns self for chaining."""
        self._checks.append(check_fn)
        return self

    def _check_missing_values(self, df: pd.DataFrame) -> list[DataQualityIssue]:
        """Required columns that are absent or null."""
        issues = []
        total = len(df)
        if total == 0:
            return issues

        for col in self.required_columns:
            if col in df.columns:
                missing = int(df[col].isna().sum())
            else:
                missing = total
            if missing > 0:
                pct = (missing / total) * 100
                issues.append(
                    DataQualityIssue(
                        column=col,
                        issue_type="missing",
                        severity=_severity_for(pct),
                        count=missing,
                        percentage=pct,
                        description=f"{missing:,} missing values ({pct:.1f}%), treated as zero/absent",
                    )
                )
        return issues

    def check_duplicates(
        self, key_columns: list[str], severity: str = "warning"
    ) -> "DataQualityChecker":
        """Rows sharing the same key."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if not set(key_columns).issubset(df.columns) or len(df) == 0:
                return []
            dupes = int(df.duplicated(subset=key_columns, keep=False).sum())
            if dupes > 0:
                return [
                    DataQualityIssue(
                        column=", ".join(key_columns),
                        issue_type="duplicate",
                        severity=severity,
                        count=dupes,
                        percentage=(dupes / len(df)) * 100,
                        description=f"{dupes:,} duplicate rows on key columns",
                    )
                ]
            return []

        return self.add_check(check)

    def check_invalid_values(
        self,
        column: str,
        valid_values: set[str],
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Values outside an allowed set (compared case-insensitively)."""
        allowed = {str(v).strip().lower() for v in valid_values}

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns or len(df) == 0:
                return []

            col_values = df[column].dropna()
            invalid_mask = ~col_values.astype(str).str.strip().str.lower().isin(allowed)
            invalid = int(invalid_mask.sum())
            if invalid > 0:
                return [
                    DataQualityIssue(
                        column=column,
                        issue_type="invalid_value",
                        severity=severity,
                        count=invalid,
                        percentage=(invalid / len(df)) * 100,
                        sample_values=col_values[invalid_mask].head(5).tolist(),
                        description=f"{invalid:,} values outside {sorted(allowed)}",
                    )
                ]
            return []

        return self.add_check(check)

    def check_non_numeric(
        self, column: str, severity: str = "warning"
    ) -> "DataQualityChecker":
        """Present values that don't parse as numbers (they count as zero)."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns or len(df) == 0:
                return []

            present = df[column].notna()
            numeric = pd.to_numeric(df[column], errors="coerce")
            bad_mask = present & numeric.isna()
            bad = int(bad_mask.sum())
            if bad > 0:
                return [
                    DataQualityIssue(
                        column=column,
                        issue_type="non_numeric",
                        severity=severity,
                        count=bad,
                        percentage=(bad / len(df)) * 100,
                        sample_values=df.loc[bad_mask, column].head(5).tolist(),
                        description=f"{bad:,} non-numeric values, treated as zero",
                    )
                ]
            return []

        return self.add_check(check)

    def check_unparseable_timestamps(
        self,
        column: str,
        parser: TimestampParser | None = None,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Present timestamps that can't be parsed (rows drop out of daily rollups)."""
        parser = parser or TimestampParser()

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns or len(df) == 0:
                return []

            present = df[column].notna()
            parsed = parser.parse_series(df[column])
            bad_mask = present & parsed.isna()
            bad = int(bad_mask.sum())
            if bad > 0:
                return [
                    DataQualityIssue(
                        column=column,
                        issue_type="unparsed_timestamp",
                        severity=severity,
                        count=bad,
                        percentage=(bad / len(df)) * 100,
                        sample_values=df.loc[bad_mask, column].head(5).tolist(),
                        description=f"{bad:,} timestamps couldn't be parsed",
                    )
                ]
            return []

        return self.add_check(check)

    def check_outliers(
        self,
        column: str,
        min_val: float | None = None,
        max_val: float | None = None,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Numeric values outside min/max bounds."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns or len(df) == 0:
                return []

            values = pd.to_numeric(df[column], errors="coerce")
            outlier_mask = pd.Series(False, index=df.index)

            if min_val is not None:
                outlier_mask |= values < min_val
            if max_val is not None:
                outlier_mask |= values > max_val

            outliers = int(outlier_mask.sum())
            if outliers > 0:
                return [
                    DataQualityIssue(
                        column=column,
                        issue_type="outlier",
                        severity=severity,
                        count=outliers,
                        percentage=(outliers / len(df)) * 100,
                        sample_values=df.loc[outlier_mask, column].head(5).tolist(),
                        description=f"{outliers:,} values outside expected range",
                    )
                ]
            return []

        return self.add_check(check)

    def record_rejected_rows(
        self, count: int, total_rows: int, samples: list[Any] | None = None
    ) -> "DataQualityChecker":
        """Report rows dropped at ingestion because they couldn't be validated."""
        if count > 0:
            pct = (count / total_rows) * 100 if total_rows else 100.0
            self._extra_issues.append(
                DataQualityIssue(
                    column="*",
                    issue_type="rejected",
                    severity="critical" if pct > 20 else "warning",
                    count=count,
                    percentage=pct,
                    sample_values=list(samples or [])[:5],
                    description=f"{count:,} rows couldn't be validated and were dropped",
                )
            )
        return self

    def run(self, df: pd.DataFrame) -> DataQualityReport:
        """Run all checks and return a quality report."""
        all_issues = list(self._extra_issues)
        for check_fn in self._checks:
            all_issues.extend(check_fn(df))

        return DataQualityReport(
            source_name=self.source_name, total_rows=len(df), issues=all_issues
        )
