from pydantic import BaseModel

from income_explorer.schemas.statement import FilterCriteria, IncomeStatement, SortSpec


class Column(BaseModel):
    key: str
    label: str
    sortable: bool = False
    indicator: str = ""


class StatementView(BaseModel):
    symbol: str
    columns: list[Column]
    filters: FilterCriteria
    sort: SortSpec
    total: int
    rows: list[IncomeStatement]
