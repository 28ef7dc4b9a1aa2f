"""Field metadata as reported live by the remote service."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ValidValue(BaseModel):
    value: str
    description: str = ""


class RemoteFieldMetadata(BaseModel):
    """Jargon service item for one table field: description, UDC mapping, enum values."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    field: str = ""
    description: Optional[str] = None
    udc_product_code: Optional[str] = Field(default=None, alias="udcProductCode")
    udc_type_code: Optional[str] = Field(default=None, alias="udcTypeCode")
    valid_values: list[ValidValue] = Field(default_factory=list, alias="validValues")

    @property
    def has_udc(self) -> bool:
        return bool(self.udc_product_code and self.udc_type_code)
