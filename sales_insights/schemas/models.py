from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)


class Transaction(CamelModel):
    id: Union[int, str]
    title: str = ""
    description: str = ""
    price: float = Field(..., ge=0, allow_inf_nan=False)
    category: str = ""
    sold: bool = False
    date_of_sale: datetime = Field(..., alias="dateOfSale")
    image: Optional[str] = None

    @field_validator("sold", mode="before")
    @classmethod
    def _missing_sold_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("title", "description", "category", mode="before")
    @classmethod
    def _missing_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class PagedResult(CamelModel):
    transactions: list[Transaction] = Field(
        ..., description="Page of matching transactions in store order."
    )
    total: int = Field(..., description="Count of all matches, ignoring pagination.")
    page: int
    per_page: int = Field(..., alias="perPage")


class Statistics(CamelModel):
    total_sale_amount: float = Field(0, alias="totalSaleAmount")
    sold_items: int = Field(0, alias="soldItems")
    not_sold_items: int = Field(0, alias="notSoldItems")


class PriceBucket(BaseModel):
    range: str
    count: int = 0


class CategoryCount(BaseModel):
    category: str
    count: int


class CombinedResult(CamelModel):
    transactions: PagedResult
    statistics: Statistics
    bar_chart: list[PriceBucket] = Field(..., alias="barChart")
    pie_chart: list[CategoryCount] = Field(..., alias="pieChart")


class SeedResponse(BaseModel):
    message: str
    count: int


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict[str, Any] = {}
