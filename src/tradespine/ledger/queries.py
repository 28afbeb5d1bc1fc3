"""
Ledger SQL: one primary header query per deal family plus the secondary
(term) and tertiary (index) correlation queries.

Every header query is a template ending in ``WHERE {where}``. The fetcher
fills it either with the incremental predicate (trade date + "changed since
the watermark") or, for by-keys lookups, with an IN predicate over the deal
keys. Binds are named (``:trade_date``, ``:last_run_time``, ``:deal_type``,
``:k0``...), which both oracledb and sqlite3 accept.

Column conventions shared by all families (lower case, as returned by
:func:`tradespine.core.adapters.rows_as_dicts`):

    =====================  ==========================================
    transaction_date       trade date
    cy_company_key         counterparty key
    company / companycode  counterparty short name / code
    legalentity            legal entity short name
    cylegalentitykey       legal entity key
    prtportfolio           portfolio id
    broker_key / broker    broker company key / short name (both nullable)
    createdby, create_date, modifiedby, modify_date
    execution_date / execution_time   raw deal attributes
    =====================  ==========================================

Tags:
    sql, ledger, oracle, queries, trade-spine
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

# Oracle rejects IN lists with more than 1000 expressions (ORA-01795)
MAX_IN_LIST = 1000


# =============================================================================
# PREDICATE BUILDERS
# =============================================================================


def in_predicate(
    column: str, keys: Sequence[int], prefix: str = "k"
) -> tuple[str, dict[str, Any]]:
    """``column IN (:k0, :k1, ...)`` with binds, split into OR'ed chunks.

    Examples:
        >>> in_predicate("pv.pd_power_key", [7, 9])
        ('pv.pd_power_key IN (:k0, :k1)', {'k0': 7, 'k1': 9})
    """
    if not keys:
        raise ValueError("in_predicate requires at least one key")
    params = {f"{prefix}{i}": key for i, key in enumerate(keys)}
    names = [f":{name}" for name in params]
    clauses = [
        f"{column} IN ({', '.join(names[i : i + MAX_IN_LIST])})"
        for i in range(0, len(names), MAX_IN_LIST)
    ]
    if len(clauses) == 1:
        return clauses[0], params
    return "(" + " OR ".join(clauses) + ")", params


def pair_predicate(
    key_column: str, seq_column: str, pairs: Sequence[tuple[int, int]]
) -> tuple[str, dict[str, Any]]:
    """``((key = :k0 AND seq = :s0) OR ...)`` for (deal key, vol seq) pairs.

    Examples:
        >>> pair_predicate("a", "b", [(1, 0)])
        ('((a = :k0 AND b = :s0))', {'k0': 1, 's0': 0})
    """
    if not pairs:
        raise ValueError("pair_predicate requires at least one pair")
    params: dict[str, Any] = {}
    clauses = []
    for i, (key, seq) in enumerate(pairs):
        params[f"k{i}"] = key
        params[f"s{i}"] = seq
        clauses.append(f"({key_column} = :k{i} AND {seq_column} = :s{i})")
    return "(" + " OR ".join(clauses) + ")", params


def ordered_keys(keys: Iterable[Any]) -> list[Any]:
    """First-appearance order, duplicates dropped."""
    return list(dict.fromkeys(keys))


# =============================================================================
# HEADER QUERY
# =============================================================================


@dataclass(frozen=True, slots=True)
class HeaderQuery:
    """Primary query of one deal family.

    Attributes:
        template: SELECT text ending in ``WHERE {where}``.
        key_column: Qualified deal-key column used by by-keys lookups.
        changed: Watermark predicate (``:last_run_time``).
        order_by: Optional ORDER BY column list.
        lookup_template: Template used by by-keys lookups when it differs.
    """

    template: str
    key_column: str
    changed: str
    order_by: str = ""
    lookup_template: str | None = None

    def _render(self, template: str, where: str) -> str:
        sql = template.format(where=where)
        if self.order_by:
            sql = f"{sql}\nORDER BY {self.order_by}"
        return sql

    def since(self, *extra: str) -> str:
        """Incremental form: trade date, extra predicates, then the watermark."""
        where = " AND ".join(["pd.trade_date = :trade_date", *extra, self.changed])
        return self._render(self.template, where)

    def by_keys(self, keys: Sequence[int]) -> tuple[str, dict[str, Any]]:
        where, params = in_predicate(self.key_column, keys)
        return self._render(self.lookup_template or self.template, where), params


# =============================================================================
# SHARED FRAGMENTS
# =============================================================================

PARTY_COLUMNS = """pd.trade_date AS transaction_date,
    pd.cy_company_key,
    c.short_name AS company,
    c.long_name AS companylongname,
    nvl(c.company_code, c.short_name) AS companycode,
    l.short_name AS legalentity,
    l.long_name AS legalentitylongname,
    pd.lgl_cy_entity_key AS cylegalentitykey,
    cn.contract_number AS contractnumber"""

PORTFOLIO_COLUMNS = """pd.hs_hedge_key,
    pd.prt_portfolio AS prtportfolio,
    p.description AS portfolio,
    pd.ur_trader"""

IB_COLUMNS = """pd.ib_prt_portfolio,
    ip.description AS ib_portfolio,
    pd.ib_ur_trader"""

BROKER_COLUMNS = """fbf.cy_broker_key AS broker_key,
    bc.short_name AS broker"""

AUDIT_COLUMNS = """pd.create_user AS createdby,
    pd.create_date,
    pd.modify_user AS modifiedby,
    pd.modify_date"""

EXECUTION_COLUMNS = """df.df_field_value AS execution_date,
    tf.df_field_value AS execution_time"""


def _deal_type_match(alias: str, tag: str | None) -> str:
    if tag is None:
        return f"pd.dlt_deal_type = {alias}.dlt_deal_type"
    return f"{alias}.dlt_deal_type = '{tag}'"


def _party_joins(join: str = "INNER JOIN", legal_join: str | None = None) -> str:
    return f"""{join} nucdba.companies c
        ON pd.cy_company_key = c.company_key
    {join} nucdba.portfolios p
        ON pd.prt_portfolio = p.portfolio
    {legal_join or join} nucdba.companies l
        ON pd.lgl_cy_entity_key = l.company_key
    LEFT OUTER JOIN nucdba.contracts cn
        ON pd.kk_contract_key = cn.contract_key"""


def _broker_joins(key: str, tag: str | None) -> str:
    return f"""LEFT OUTER JOIN nucdba.flat_broker_fees fbf
        ON pd.{key} = fbf.deal_key
            AND {_deal_type_match("fbf", tag)}
    LEFT OUTER JOIN nucdba.companies bc
        ON fbf.cy_broker_key = bc.company_key"""


IB_JOIN = """LEFT OUTER JOIN nucdba.portfolios ip
        ON pd.ib_prt_portfolio = ip.portfolio"""


def _months_join(table: str, alias: str, key: str, column: str, join: str = "INNER JOIN") -> str:
    return f"""{join} nucdba.{table} {alias}
        ON pd.{key} = {alias}.{column}"""


def _attribute_join(alias: str, key: str, tag: str | None, field_name: str) -> str:
    return f"""LEFT OUTER JOIN nucdba.df_deal_attributes {alias}
        ON pd.{key} = {alias}.deal_key
            AND {_deal_type_match(alias, tag)}
            AND {alias}.df_field_name = '{field_name}'"""


def _execution_joins(key: str, tag: str | None, exotic: bool = False) -> str:
    joins = [
        _attribute_join("df", key, tag, "EXECUTION_DATE"),
        _attribute_join("tf", key, tag, "EXECUTION_TIMESTAMP"),
    ]
    if exotic:
        joins.append(_attribute_join("ef", key, tag, "EXOTIC_TRADE_FLAG"))
    return "\n    ".join(joins)


def _changed(volumes: tuple[str, str, str] | None = None, fees: bool = True) -> str:
    """Watermark predicate.

    ``volumes`` is ``(table, volume key column, header key column)``; a
    volume row modified after the watermark marks its deal as changed.
    """
    parts = ["pd.modify_date > :last_run_time"]
    if volumes is not None:
        table, volume_key, header_key = volumes
        parts.append(
            f"EXISTS (SELECT 1 FROM nucdba.{table} pv "
            f"WHERE pv.{volume_key} = pd.{header_key} "
            f"AND pv.modify_date > :last_run_time)"
        )
    if fees:
        parts.append("fbf.modify_date > :last_run_time")
    return "(" + " OR ".join(parts) + ")"


# =============================================================================
# POWER
# =============================================================================

POWER = HeaderQuery(
    template=f"""SELECT DISTINCT pd.power_key,
    pd.dlt_deal_type AS deal_type,
    pd.dn_direction,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    pvm.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    pd.tz_time_zone,
    {BROKER_COLUMNS},
    pd.option_key,
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS},
    nvl(ef.df_field_value, 'NA') AS exotic_flag
FROM nucdba.power_deals pd
    {_party_joins()}
    {_broker_joins("power_key", None)}
    {_months_join("power_volume_months", "pvm", "power_key", "pv_pd_power_key")}
    {_execution_joins("power_key", None, exotic=True)}
WHERE {{where}}""",
    key_column="pd.power_key",
    changed=_changed(("power_volumes", "pd_power_key", "power_key")),
    order_by="pd.power_key",
)

POWER_TERMS = """SELECT pv.pd_power_key,
    pv.volume_seq,
    pv.dy_beg_day,
    pv.dy_end_day,
    pv.price_type,
    pv.price,
    pv.volume,
    pv.ppep_pp_pool,
    pv.ppep_pep_product,
    pv.ctp_point_code,
    pv.formula,
    pv.sch_schedule
FROM nucdba.power_volumes pv
WHERE {where}"""

POWER_INDEXES = """SELECT pv_pd_power_key,
    pv_volume_seq,
    pif_pi_pb_publication AS publication,
    pif_pi_pub_index AS pub_index,
    pif_frq_frequency AS frequency
FROM nucdba.power_volume_indexes
WHERE {where}"""


# =============================================================================
# POWER SWAP
# =============================================================================

POWER_SWAP = HeaderQuery(
    template=f"""SELECT DISTINCT pd.pswap_key,
    pd.dlt_deal_type AS deal_type,
    (SELECT sum(abs(m.volume)) FROM nucdba.power_swap_months m
        WHERE m.pswap_key = pd.pswap_key) AS total_quantity,
    pd.volume,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    psm.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    {IB_COLUMNS},
    pd.tz_time_zone,
    {BROKER_COLUMNS},
    pd.option_key,
    pd.ppep_pp_pool,
    pd.ppep_pep_product,
    pd.fixed_price,
    pd.nonstd_flag,
    pd.pi_pb_publication,
    pd.pi_pub_index,
    pd.frq_frequency,
    pd.fix_pi_pb_publication,
    pd.fix_pi_pub_index,
    pd.fix_frq_frequency,
    pd.dy_beg_day,
    pd.dy_end_day,
    pd.sch_schedule,
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS},
    nvl(ef.df_field_value, 'NA') AS exotic_flag
FROM nucdba.power_swaps pd
    {_party_joins()}
    {_broker_joins("pswap_key", None)}
    {_months_join("power_swap_months", "psm", "pswap_key", "pswap_key")}
    {IB_JOIN}
    {_execution_joins("pswap_key", None, exotic=True)}
WHERE {{where}}""",
    key_column="pd.pswap_key",
    changed=_changed(),
)

POWER_SWAP_TERMS = """SELECT pswp_pswap_key,
    volume_seq,
    dy_beg_day,
    dy_end_day
FROM nucdba.power_swap_volumes
WHERE {where}"""


# =============================================================================
# POWER OPTION
# =============================================================================


def _power_options_select(join: str) -> str:
    return f"""SELECT DISTINCT pd.poption_key,
    'POPTS' AS deal_type,
    (SELECT sum(abs(m.volume)) FROM nucdba.power_option_months m
        WHERE m.poption_key = pd.poption_key) AS total_quantity,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    pom.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    {IB_COLUMNS},
    pd.tz_time_zone,
    pd.tz_exercise_zone,
    {BROKER_COLUMNS},
    pd.ppep_pp_pool,
    pd.ppep_pep_product,
    pd.ctp_point_code,
    pd.settle_formula,
    pd.dy_beg_day,
    pd.dy_end_day,
    pd.sch_schedule,
    pd.volume,
    pd.strike_price,
    pd.strike_price_type,
    pd.strike_formula,
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS},
    nvl(ef.df_field_value, 'NA') AS exotic_flag
FROM nucdba.power_options pd
    {_party_joins(join)}
    {_broker_joins("poption_key", "POPTS")}
    {_months_join("power_option_months", "pom", "poption_key", "poption_key", join)}
    {IB_JOIN}
    {_execution_joins("poption_key", "POPTS", exotic=True)}
WHERE {{where}}"""


POWER_OPTIONS = HeaderQuery(
    template=_power_options_select("INNER JOIN"),
    key_column="pd.poption_key",
    changed=_changed(),
    lookup_template=_power_options_select("LEFT OUTER JOIN"),
)


# =============================================================================
# CAPACITY
# =============================================================================

CAPACITY = HeaderQuery(
    template=f"""SELECT DISTINCT pd.capacity_key,
    'CAPCTY' AS deal_type,
    (SELECT sum(abs(m.volume)) FROM nucdba.capacity_deal_months m
        WHERE m.cpd_capacity_key = pd.capacity_key) AS total_quantity,
    pd.dn_direction,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    cdm.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    pd.tz_time_zone,
    {BROKER_COLUMNS},
    pd.non_standard_flag,
    pd.price_type,
    pd.charge,
    pd.volume,
    pd.energy_formula,
    pd.ppcp_pp_pool,
    pd.ppcp_pcp_product,
    pd.ctp_point_code,
    pd.dy_beg_day,
    pd.dy_end_day,
    pd.sch_schedule,
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS}
FROM nucdba.capacity_deals pd
    {_party_joins()}
    {_broker_joins("capacity_key", "CAPCTY")}
    {_months_join("capacity_deal_months", "cdm", "capacity_key", "cpd_capacity_key")}
    {_execution_joins("capacity_key", "CAPCTY")}
WHERE {{where}}""",
    key_column="pd.capacity_key",
    changed=_changed(),
)

CAPACITY_TERMS = """SELECT DISTINCT cpd_capacity_key,
    dy_beg_day,
    dy_end_day
FROM nucdba.capacity_volume_ranges
WHERE {where}"""

CAPACITY_INDEXES = """SELECT cpd_capacity_key,
    pif_pi_pb_publication AS publication,
    pif_pi_pub_index AS pub_index,
    pif_frq_frequency AS frequency
FROM nucdba.capacity_deal_indexes
WHERE {where}"""


# =============================================================================
# POINT-TO-POINT
# =============================================================================

PTP = HeaderQuery(
    template=f"""SELECT DISTINCT pd.ptp_key,
    'PTP' AS deal_type,
    {PARTY_COLUMNS},
    pm.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    pd.tz_time_zone,
    {BROKER_COLUMNS},
    pd.dy_flow_day,
    pd.ppep_pp_pool,
    pd.ppep_pep_product,
    pd.da_pi_pb_publication AS publication1,
    pd.poi_pi_pub_index AS pub_index1,
    pd.rt_pi_pb_publication AS publication2,
    pd.pow_pi_pub_index AS pub_index2,
    {AUDIT_COLUMNS}
FROM nucdba.ptp_deals pd
    {_party_joins()}
    {_broker_joins("ptp_key", "PTP")}
    {_months_join("ptp_months", "pm", "ptp_key", "ptp_key")}
WHERE {{where}}""",
    key_column="pd.ptp_key",
    changed=_changed(),
)


# =============================================================================
# EMISSION
# =============================================================================

EMISSION = HeaderQuery(
    template=f"""SELECT DISTINCT pd.emission_key,
    'EMSSN' AS deal_type,
    pd.dn_direction,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    edm.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    {BROKER_COLUMNS},
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS}
FROM nucdba.emission_deals pd
    {_party_joins()}
    {_broker_joins("emission_key", "EMSSN")}
    {_months_join("emission_volume_months", "edm", "emission_key", "ev_ed_emission_key")}
    {_execution_joins("emission_key", "EMSSN")}
WHERE {{where}}""",
    key_column="pd.emission_key",
    changed=_changed(("emission_volumes", "ed_emission_key", "emission_key")),
)

EMISSION_TERMS = """SELECT pv.ed_emission_key,
    pv.volume_seq,
    pv.dy_beg_day,
    pv.dy_end_day,
    pv.price_type,
    pv.price,
    pv.volume,
    pv.epdt_emission_product,
    pv.ctp_point_code,
    pv.formula
FROM nucdba.emission_volumes pv
WHERE {where}"""


# =============================================================================
# EMISSION OPTION
# =============================================================================

EMISSION_OPTION = HeaderQuery(
    template=f"""SELECT DISTINCT pd.eoption_key,
    'EMOPTS' AS deal_type,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    pd.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    pd.tz_exercise_zone AS tz_time_zone,
    {BROKER_COLUMNS},
    pd.ed_emission_key,
    pd.strike_price,
    pd.volume,
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS}
FROM nucdba.emission_options pd
    {_party_joins()}
    {_broker_joins("eoption_key", "EMOPTS")}
    {_execution_joins("eoption_key", "EMOPTS")}
WHERE {{where}}""",
    key_column="pd.eoption_key",
    # the volume rows are matched on the option key itself
    changed=_changed(("emission_volumes", "ed_emission_key", "eoption_key")),
)

EMISSION_OPTION_TERMS = """SELECT pv.ed_emission_key,
    pv.volume_seq,
    pv.dy_beg_day,
    pv.dy_end_day,
    pv.ctp_point_code,
    pv.epdt_emission_product
FROM nucdba.emission_volumes pv
WHERE {where}"""


# =============================================================================
# SPREAD OPTION
# =============================================================================

SPREAD_OPTION = HeaderQuery(
    template=f"""SELECT DISTINCT pd.spread_option_key,
    'SPDOPT' AS deal_type,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    som.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    {IB_COLUMNS},
    {BROKER_COLUMNS},
    pd.dy_beg_day1,
    pd.dy_end_day1,
    pd.sch_schedule,
    pd.formula1,
    pd.formula2,
    pd.ppep_pp_pool1,
    pd.ppep_pp_pool2,
    pd.ppep_pep_product1,
    pd.ppep_pep_product2,
    pd.volume,
    pd.strike_price,
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS},
    nvl(ef.df_field_value, 'NA') AS exotic_flag,
    nvl(pd.ctp_point_code1, 'NOT APPLICABLE') AS point_code
FROM nucdba.spread_options pd
    {_party_joins(legal_join="LEFT OUTER JOIN")}
    {_broker_joins("spread_option_key", "SPDOPT")}
    {IB_JOIN}
    {_months_join("spread_option_months", "som", "spread_option_key", "spread_option_key", "LEFT OUTER JOIN")}
    {_execution_joins("spread_option_key", "SPDOPT", exotic=True)}
WHERE {{where}}""",
    key_column="pd.spread_option_key",
    changed=_changed(),
)


# =============================================================================
# HEAT-RATE SWAP
# =============================================================================

HEAT_RATE_SWAP = HeaderQuery(
    template=f"""SELECT DISTINCT pd.hrswps_key,
    'HRSWPS' AS deal_type,
    (SELECT sum(abs(m.volume1 + m.r_volume1)) FROM nucdba.heat_rate_swap_months m
        WHERE m.hrswps_key = pd.hrswps_key) AS total_quantity,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    hsm.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    {BROKER_COLUMNS},
    pd.option_key,
    pd.ppep_pp_pool,
    pd.ppep_pep_product,
    pd.pif_pi_pb_publication1,
    pd.pif_pi_pub_index1,
    pd.pif_pi_pb_publication2,
    pd.pif_pi_pub_index2,
    pd.pif_frq_frequency2,
    pd.dy_beg_day,
    pd.dy_end_day,
    pd.sch_schedule,
    pd.volume1,
    {AUDIT_COLUMNS},
    {EXECUTION_COLUMNS}
FROM nucdba.heat_rate_swaps pd
    {_party_joins()}
    {_broker_joins("hrswps_key", "HRSWPS")}
    {_months_join("heat_rate_swap_months", "hsm", "hrswps_key", "hrswps_key")}
    {_execution_joins("hrswps_key", "HRSWPS")}
WHERE {{where}}""",
    key_column="pd.hrswps_key",
    changed=_changed(),
)


# =============================================================================
# TCC / FTR
# =============================================================================

TCC_FTR = HeaderQuery(
    template=f"""SELECT DISTINCT pd.deal_key,
    pd.dlt_deal_type AS deal_type,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    itm.gr_region AS region,
    {PORTFOLIO_COLUMNS},
    pd.tz_time_zone,
    {BROKER_COLUMNS},
    pd.dy_beg_day,
    pd.dy_end_day,
    pd.sch_schedule,
    pd.volume,
    pd.fixed_price,
    pd.ppep_pp_pool,
    pd.ppep_pep_product,
    pd.pi_pb_publication,
    pd.frq_frequency,
    pd.poi_pi_pub_index,
    pd.pow_pi_pub_index,
    {AUDIT_COLUMNS}
FROM nucdba.iso_tccftrs pd
    {_party_joins()}
    {_broker_joins("deal_key", None)}
    {_months_join("iso_tccftr_months", "itm", "deal_key", "deal_key")}
WHERE {{where}}""",
    key_column="pd.deal_key",
    changed=_changed(),
)

TCC_DEAL_TYPE_FILTER = "pd.dlt_deal_type = :deal_type"


# =============================================================================
# TRANSMISSION
# =============================================================================

TRANSMISSION = HeaderQuery(
    template=f"""SELECT DISTINCT pd.trans_key,
    'TRANS' AS deal_type,
    pd.dn_direction,
    {PARTY_COLUMNS},
    pd.cf_confirm_format AS confirmformat,
    tvm.gr_fm_region AS region,
    {PORTFOLIO_COLUMNS},
    pd.tz_time_zone,
    {BROKER_COLUMNS},
    {AUDIT_COLUMNS},
    nvl(df.df_field_value, '01/01/1900') AS execution_time
FROM nucdba.transmission_deals pd
    {_party_joins()}
    {_broker_joins("trans_key", "TRANS")}
    {_months_join("trans_volume_months", "tvm", "trans_key", "tv_td_trans_key")}
    {_attribute_join("df", "trans_key", "TRANS", "EXECUTION_TIMESTAMP")}
WHERE {{where}}""",
    key_column="pd.trans_key",
    changed=_changed(("trans_volumes", "td_trans_key", "trans_key")),
)

TRANSMISSION_TERMS = """SELECT pv.td_trans_key,
    pv.volume_seq,
    pv.dy_beg_day,
    pv.dy_end_day,
    pv.volume,
    pv.ppep_pep_product,
    pv.ppep_pp_fm_pool,
    pv.ctp_fm_point_code,
    pv.ppep_pp_to_pool,
    pv.ctp_to_point_code,
    pv.sch_schedule
FROM nucdba.trans_volumes pv
WHERE {where}"""


# =============================================================================
# MISC CHARGE
# =============================================================================

MISC_CHARGE = HeaderQuery(
    template=f"""SELECT DISTINCT pd.misc_charge_key,
    'MISC' AS deal_type,
    pd.rec_pay_flag,
    {PARTY_COLUMNS},
    {PORTFOLIO_COLUMNS},
    {AUDIT_COLUMNS}
FROM nucdba.misc_charges pd
    {_party_joins()}
WHERE {{where}}""",
    key_column="pd.misc_charge_key",
    changed=_changed(fees=False),
)

MISC_CHARGE_TERMS = """SELECT pv.mc_misc_charge_key,
    pv.misc_vol_seq,
    pv.dy_beg_day,
    pv.dy_end_day,
    pv.int_volume
FROM nucdba.misc_charge_volumes pv
WHERE {where}"""


__all__ = [
    "CAPACITY",
    "CAPACITY_INDEXES",
    "CAPACITY_TERMS",
    "EMISSION",
    "EMISSION_OPTION",
    "EMISSION_OPTION_TERMS",
    "EMISSION_TERMS",
    "HEAT_RATE_SWAP",
    "MAX_IN_LIST",
    "MISC_CHARGE",
    "MISC_CHARGE_TERMS",
    "POWER",
    "POWER_INDEXES",
    "POWER_OPTIONS",
    "POWER_SWAP",
    "POWER_SWAP_TERMS",
    "POWER_TERMS",
    "PTP",
    "SPREAD_OPTION",
    "TCC_DEAL_TYPE_FILTER",
    "TCC_FTR",
    "TRANSMISSION",
    "TRANSMISSION_TERMS",
    "HeaderQuery",
    "in_predicate",
    "ordered_keys",
    "pair_predicate",
]
