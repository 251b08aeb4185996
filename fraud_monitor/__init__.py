"""Public interface for the ``fraud_monitor`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .aggregates import MerchantAggregate, MerchantAggregateStore, Observation
from .api import IngestSummary, ingest_feeds, ingest_rows, run, run_fraud_check
from .errors import FraudMonitorError, ParseError, StorageError
from .findings import AmountFinding, Finding, FindingSink, GeographicFinding
from .models import AccountRecord, MerchantDescription, TransactionRecord
from .normalizers import normalize_account, normalize_transaction, parse_merchant_description
from .reader import FeedSchema, RawRow, open_feed, read_feed, split_line
from .regions import RegionTable
from .rules import FraudRuleConfig, FraudRuleEngine

__all__ = [
    # API
    "ingest_feeds",
    "ingest_rows",
    "run",
    "run_fraud_check",
    "IngestSummary",
    # Reading / normalization
    "FeedSchema",
    "RawRow",
    "open_feed",
    "read_feed",
    "split_line",
    "normalize_account",
    "normalize_transaction",
    "parse_merchant_description",
    "RegionTable",
    # Rules
    "FraudRuleConfig",
    "FraudRuleEngine",
    "MerchantAggregate",
    "MerchantAggregateStore",
    "Observation",
    # Models / types
    "AccountRecord",
    "TransactionRecord",
    "MerchantDescription",
    "AmountFinding",
    "GeographicFinding",
    "Finding",
    "FindingSink",
    # Errors
    "FraudMonitorError",
    "ParseError",
    "StorageError",
]
