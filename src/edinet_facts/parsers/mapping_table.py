"""
Declarative element-name -> field mapping, one table per statement kind.

The data lives in config/mappings.yaml; this module only binds it to the
record type it fills. Recognizing a new fact means adding a YAML entry
(and the record field), never changing resolver code.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Type

from edinet_facts.config import FactMappingConfig, get_fact_mappings
from edinet_facts.models.statements import (
    BalanceSheetFacts,
    IncomeStatementFacts,
    StatementFacts,
)


RECORD_TYPES: Dict[str, Type[StatementFacts]] = {
    'income_statement': IncomeStatementFacts,
    'balance_sheet': BalanceSheetFacts,
}


@dataclass(frozen=True)
class MappingTable:
    """
    Qualified element name -> output field identifier for one statement kind.

    Attributes:
        kind: Statement kind ('income_statement' or 'balance_sheet')
        qualifier: Default contextRef selected for this kind
        entries: Element name -> field identifier (read-only)
        record_type: Fact record class the fields belong to

    Example:
        >>> table = MappingTable.for_kind('income_statement')
        >>> table.field_for('jppfs_cor:NetSales')
        'net_sales'
        >>> 'jppfs_cor:Unknown' in table
        False
    """
    kind: str
    qualifier: str
    entries: Mapping[str, str]
    record_type: Type[StatementFacts]

    def __post_init__(self):
        known = set(self.record_type.field_ids())
        unknown = sorted(set(self.entries.values()) - known)
        if unknown:
            raise ValueError(
                f"Mapping table '{self.kind}' targets fields missing from "
                f"{self.record_type.__name__}: {unknown}"
            )
        object.__setattr__(self, 'entries', MappingProxyType(dict(self.entries)))

    @classmethod
    def for_kind(cls, kind: str, config: Optional[FactMappingConfig] = None) -> 'MappingTable':
        """
        Build the table for a statement kind from configuration.

        Args:
            kind: 'income_statement' or 'balance_sheet'
            config: Mapping config (defaults to the global config/mappings.yaml)

        Raises:
            KeyError: If kind is unknown
        """
        if kind not in RECORD_TYPES:
            raise KeyError(f"Unknown statement kind: {kind}")
        statement = (config or get_fact_mappings()).get_statement(kind)
        return cls(
            kind=kind,
            qualifier=statement.qualifier,
            entries=statement.entries,
            record_type=RECORD_TYPES[kind],
        )

    def field_for(self, name: str) -> Optional[str]:
        return self.entries.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)


def income_statement_table() -> MappingTable:
    return MappingTable.for_kind('income_statement')


def balance_sheet_table() -> MappingTable:
    return MappingTable.for_kind('balance_sheet')
