"""
Pydantic models for extracted financial statement facts.

Schema Design:
- One record per document per statement kind
- Every fact is Optional[float]: None means "not reported", never zero
- Flat column layout for persistence (balance sheet groups are flattened)
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StatementFacts(BaseModel):
    """
    Base class for flat fact records.

    Subclasses declare one Optional[float] field per recognized fact.
    Field identifiers used by mapping tables are the field names.
    """

    model_config = ConfigDict(extra='forbid')

    @classmethod
    def field_ids(cls) -> List[str]:
        """Field identifiers a mapping table may target."""
        return list(cls.model_fields.keys())

    @classmethod
    def from_fields(cls, values: Dict[str, float]) -> 'StatementFacts':
        """Build a record from field identifier -> value."""
        return cls(**values)

    def to_flat_dict(self) -> Dict[str, Optional[float]]:
        """Column name -> value, absent facts included as None."""
        return self.model_dump()

    def to_mongo_dict(self, doc_id: str) -> Dict[str, Any]:
        """Document for the statement collection, keyed by doc_id."""
        return {'doc_id': doc_id, **self.to_flat_dict()}

    def populated_count(self) -> int:
        """Number of facts that were found."""
        return sum(1 for value in self.to_flat_dict().values() if value is not None)

    def is_empty(self) -> bool:
        return self.populated_count() == 0


class IncomeStatementFacts(StatementFacts):
    """
    Income statement facts for the cumulative year-to-date context.

    Example:
        >>> facts = IncomeStatementFacts(net_sales=1000.0, cost_of_sales=400.0)
        >>> facts.gross_profit is None
        True
    """

    net_sales: Optional[float] = Field(default=None, description="Net sales")
    cost_of_sales: Optional[float] = Field(default=None, description="Cost of sales")
    gross_profit: Optional[float] = Field(default=None, description="Gross profit")
    selling_general_admin: Optional[float] = Field(
        default=None, description="Selling, general and administrative expenses"
    )
    operating_income: Optional[float] = Field(default=None, description="Operating income")
    interest_income_noi: Optional[float] = Field(default=None, description="Interest income (non-operating)")
    dividends_income_noi: Optional[float] = Field(default=None, description="Dividend income (non-operating)")
    interest_and_dividends_income_noi: Optional[float] = Field(
        default=None, description="Interest and dividend income (non-operating)"
    )
    purchase_discounts_noi: Optional[float] = Field(default=None, description="Purchase discounts (non-operating)")
    rent_income_noi: Optional[float] = Field(default=None, description="Rent income (non-operating)")
    house_rent_income_noi: Optional[float] = Field(default=None, description="House rent income (non-operating)")
    other_noi: Optional[float] = Field(default=None, description="Other non-operating income")
    non_operating_income: Optional[float] = Field(default=None, description="Total non-operating income")
    sales_discounts_noe: Optional[float] = Field(default=None, description="Sales discounts (non-operating)")
    rent_cost_real_estate_noe: Optional[float] = Field(
        default=None, description="Rent cost of real estate (non-operating)"
    )
    other_noe: Optional[float] = Field(default=None, description="Other non-operating expenses")
    non_operating_expenses: Optional[float] = Field(default=None, description="Total non-operating expenses")
    ordinary_income: Optional[float] = Field(default=None, description="Ordinary income")
    gain_on_sales_of_noncurrent_assets_ei: Optional[float] = Field(
        default=None, description="Gain on sales of noncurrent assets (extraordinary)"
    )
    extraordinary_income: Optional[float] = Field(default=None, description="Total extraordinary income")
    income_before_income_taxes: Optional[float] = Field(default=None, description="Income before income taxes")
    income_taxes_current: Optional[float] = Field(default=None, description="Income taxes, current")
    income_taxes_deferred: Optional[float] = Field(default=None, description="Income taxes, deferred")
    income_taxes: Optional[float] = Field(default=None, description="Total income taxes")
    income_before_minority_interests: Optional[float] = Field(
        default=None, description="Income before minority interests"
    )
    net_income: Optional[float] = Field(default=None, description="Net income")


class Assets(BaseModel):
    model_config = ConfigDict(extra='forbid')

    cash_and_deposits: Optional[float] = None
    notes_and_accounts_receivable_trade: Optional[float] = None
    short_term_investment_securities: Optional[float] = None
    merchandise: Optional[float] = None
    property_plant_and_equipment: Optional[float] = None
    intangible_assets: Optional[float] = None
    investments_and_other_assets: Optional[float] = None
    total_assets: Optional[float] = None


class Liabilities(BaseModel):
    model_config = ConfigDict(extra='forbid')

    current_liabilities: Optional[float] = None
    noncurrent_liabilities: Optional[float] = None
    total_liabilities: Optional[float] = None


class Equity(BaseModel):
    model_config = ConfigDict(extra='forbid')

    shareholders_equity: Optional[float] = None
    valuation_and_translation_adjustments: Optional[float] = None
    total_equity: Optional[float] = None


class BalanceSheetFacts(StatementFacts):
    """
    Balance sheet facts for the instantaneous snapshot context.

    Facts are grouped into assets, liabilities and equity. Mapping tables
    address them as '<group>.<field>' (e.g., 'assets.total_assets').
    Persistence uses the flattened field names, which are unique across groups.

    Example:
        >>> sheet = BalanceSheetFacts.from_fields({'assets.total_assets': 5e9})
        >>> sheet.assets.total_assets
        5000000000.0
        >>> sheet.to_flat_dict()['total_assets']
        5000000000.0
    """

    assets: Assets = Field(default_factory=Assets)
    liabilities: Liabilities = Field(default_factory=Liabilities)
    equity: Equity = Field(default_factory=Equity)

    @classmethod
    def field_ids(cls) -> List[str]:
        ids = []
        for group, info in cls.model_fields.items():
            ids.extend(f"{group}.{name}" for name in info.annotation.model_fields)
        return ids

    @classmethod
    def from_fields(cls, values: Dict[str, float]) -> 'BalanceSheetFacts':
        grouped: Dict[str, Dict[str, float]] = {group: {} for group in cls.model_fields}
        for field_id, value in values.items():
            group, _, name = field_id.partition('.')
            if group not in grouped or not name:
                raise ValueError(f"Unknown balance sheet field: {field_id}")
            grouped[group][name] = value
        return cls(**grouped)

    def to_flat_dict(self) -> Dict[str, Optional[float]]:
        flat: Dict[str, Optional[float]] = {}
        for group in self.model_dump().values():
            flat.update(group)
        return flat
