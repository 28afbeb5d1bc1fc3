"""
Analytics store tables.

The analytics store is the write-capable side of trade-spine. It holds the
extraction-run cursor, the processed-trade upsert target and the two
read-only reference sets used by the scoring models.

Architecture:
    ::

        ANALYTICS_TABLES
        ┌────────────────────────────────────────────────────────────┐
        │ extraction_runs   → trade_extraction_runs   (append-only)  │
        │ processed_trades  → processed_trades        (upsert)       │
        │ portfolio_risk    → portfolio_risk_mapping  (reference)    │
        │ lar_base          → lar_base                (reference)    │
        │ lar_product_ref   → lar_product_source_ref  (reference)    │
        └────────────────────────────────────────────────────────────┘

    DDL is rendered per dialect (column types, identity column), so the
    same statements create the schema on SQLite, PostgreSQL and Oracle 23ai.

Examples:
    >>> from tradespine.core.adapters import SQLiteAdapter
    >>> from tradespine.analytics.schema import create_schema
    >>> adapter = SQLiteAdapter()
    >>> create_schema(adapter)[0]
    'trade_extraction_runs'

Tags:
    schema, ddl, analytics, trade-spine
"""

from __future__ import annotations

from tradespine.core.adapters import DatabaseAdapter
from tradespine.core.dialect import Dialect
from tradespine.core.logging import get_logger

logger = get_logger(__name__)

# =============================================================================
# TABLE NAMES
# =============================================================================

ANALYTICS_TABLES = {
    "extraction_runs": "trade_extraction_runs",
    "processed_trades": "processed_trades",
    "portfolio_risk": "portfolio_risk_mapping",
    "lar_base": "lar_base",
    "lar_product_ref": "lar_product_source_ref",
}

# lar_base columns other than the identity of the report line
LAR_TEXT_COLUMNS = (
    "short_name",
    "counterparty_long_name",
    "parent_company",
    "product",
    "source_system",
    "deal_type",
    "netting_agreement",
    "agreement_type_per_csa",
    "buy_tenor",
    "sell_tenor",
    "limit_currency",
    "limit_availability",
    "expiration_date",
    "market_type",
    "industry_code",
    "sp_rating",
    "moody_rating",
    "final_internal_rating",
    "final_rating",
    "equifax",
    "amended_by",
    "dodd_frank_classification",
    "boost",
    "trading_entity",
    "agmt",
    "csa",
    "tenor",
)
LAR_NUMERIC_COLUMNS = (
    "our_threshold",
    "counterparty_threshold",
    "gross_exposure",
    "collateral",
    "net_position",
    "limit_value",
    "exposure_limit",
    "credit_limit",
)
LAR_TIMESTAMP_COLUMNS = (
    "effective_date",
    "review_date",
    "report_created_date",
    "reporting_date",
    "created_at",
)


# =============================================================================
# DDL STATEMENTS
# =============================================================================


def analytics_ddl(dialect: Dialect) -> dict[str, list[str]]:
    """CREATE statements (tables first, then indexes) keyed by logical name."""
    ts = dialect.timestamp_type()
    text = dialect.text_type()
    t = ANALYTICS_TABLES

    lar_columns = ",\n            ".join(
        [f"{c} VARCHAR(255)" for c in LAR_TEXT_COLUMNS]
        + [f"{c} NUMERIC(20, 4)" for c in LAR_NUMERIC_COLUMNS]
        + [f"{c} {ts}" for c in LAR_TIMESTAMP_COLUMNS]
    )

    return {
        # =====================================================================
        # Append-only: "most recent" is MAX(run_id), never MAX(cutoff)
        # =====================================================================
        "extraction_runs": [
            f"""
        CREATE TABLE IF NOT EXISTS {t["extraction_runs"]} (
            run_id {dialect.auto_increment()},
            transaction_date {ts} NOT NULL,
            deal_type VARCHAR(16) NOT NULL,
            cutoff {ts} NOT NULL,
            created_at {ts} NOT NULL
        )
        """,
            f"CREATE INDEX IF NOT EXISTS idx_extraction_runs_date_type "
            f"ON {t['extraction_runs']}(transaction_date, deal_type)",
        ],
        "processed_trades": [
            f"""
        CREATE TABLE IF NOT EXISTS {t["processed_trades"]} (
            trade_id INTEGER NOT NULL,
            deal_type VARCHAR(16) NOT NULL,
            portfolio_id INTEGER NOT NULL,
            transaction_date {ts} NOT NULL,
            trade_detail {text} NOT NULL,
            anomaly_detected INTEGER NOT NULL,
            anomaly_test_result {text},
            model_parameters {text},
            PRIMARY KEY (trade_id, deal_type)
        )
        """,
        ],
        "portfolio_risk": [
            f"""
        CREATE TABLE IF NOT EXISTS {t["portfolio_risk"]} (
            source_system VARCHAR(32) NOT NULL,
            portfolio VARCHAR(64) NOT NULL,
            legal_entity VARCHAR(128)
        )
        """,
        ],
        "lar_base": [
            f"""
        CREATE TABLE IF NOT EXISTS {t["lar_base"]} (
            {lar_columns}
        )
        """,
            f"CREATE INDEX IF NOT EXISTS idx_lar_base_reporting_date "
            f"ON {t['lar_base']}(reporting_date)",
        ],
        "lar_product_ref": [
            f"""
        CREATE TABLE IF NOT EXISTS {t["lar_product_ref"]} (
            product_name VARCHAR(128) NOT NULL,
            source_system VARCHAR(32) NOT NULL,
            legal_entity VARCHAR(128)
        )
        """,
        ],
    }


def create_schema(adapter: DatabaseAdapter) -> list[str]:
    """
    Create every analytics table.

    Safe to call multiple times (CREATE IF NOT EXISTS). Returns the table
    names that were ensured.
    """
    ddl = analytics_ddl(adapter.dialect)
    with adapter.transaction() as conn:
        cursor = conn.cursor()
        for statements in ddl.values():
            for statement in statements:
                cursor.execute(statement)
    created = [ANALYTICS_TABLES[name] for name in ddl]
    logger.info("analytics_schema_ready", tables=len(created), dialect=adapter.dialect.name)
    return created


__all__ = [
    "ANALYTICS_TABLES",
    "LAR_NUMERIC_COLUMNS",
    "LAR_TEXT_COLUMNS",
    "LAR_TIMESTAMP_COLUMNS",
    "analytics_ddl",
    "create_schema",
]
