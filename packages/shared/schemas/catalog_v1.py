"""Shared inbound snapshot schema (v1).

These are the shapes the backend hands to the apps when a sale session starts: the van
inventory, the customer list and the per-customer special prices. Field aliases are the
backend's camelCase names; the older van-inventory names are accepted as well.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProductV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(
        validation_alias=AliasChoices("productId", "product_id"),
        serialization_alias="productId",
    )
    sku: str = ""
    name: str = Field(
        "",
        validation_alias=AliasChoices("name", "productName"),
        serialization_alias="name",
    )

    base_unit: str = Field(
        "piece",
        validation_alias=AliasChoices("baseUnit", "base_unit"),
        serialization_alias="baseUnit",
    )
    second_unit: str | None = Field(
        None,
        validation_alias=AliasChoices("secondUnit", "second_unit"),
        serialization_alias="secondUnit",
    )
    # 0 or null means the product has no second unit.
    units_per_second_unit: int | None = Field(
        1,
        ge=0,
        validation_alias=AliasChoices(
            "unitsPerSecondUnit", "unitsPerSecond", "units_per_second_unit"
        ),
        serialization_alias="unitsPerSecondUnit",
    )
    # Van inventory quantities are decimals; whole base units are taken when snapshotting.
    stock_in_base_units: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("stockInBaseUnits", "quantity", "stock_in_base_units"),
        serialization_alias="stockInBaseUnits",
    )

    base_unit_price: Decimal = Field(
        Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("baseUnitPrice", "retailPrice", "base_unit_price"),
        serialization_alias="baseUnitPrice",
    )
    second_unit_price: Decimal = Field(
        Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("secondUnitPrice", "boxRetailPrice", "second_unit_price"),
        serialization_alias="secondUnitPrice",
    )

    barcode: str | None = None
    second_unit_barcode: str | None = Field(
        None,
        validation_alias=AliasChoices("secondUnitBarcode", "boxBarcode", "second_unit_barcode"),
        serialization_alias="secondUnitBarcode",
    )
    image_url: str | None = Field(
        None,
        validation_alias=AliasChoices("imageUrl", "image_url"),
        serialization_alias="imageUrl",
    )

    # Only set for storefront catalogs (one merchant per store).
    store_id: int | None = Field(
        None,
        validation_alias=AliasChoices("storeId", "companyId", "store_id"),
        serialization_alias="storeId",
    )
    currency: str = "USD"


class CustomerPriceOverrideV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(
        validation_alias=AliasChoices("productId", "product_id"),
        serialization_alias="productId",
    )
    base_unit_override: Decimal | None = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("baseUnitOverride", "specialPrice", "base_unit_override"),
        serialization_alias="baseUnitOverride",
    )
    second_unit_override: Decimal | None = Field(
        None,
        ge=0,
        validation_alias=AliasChoices(
            "secondUnitOverride", "boxSpecialPrice", "second_unit_override"
        ),
        serialization_alias="secondUnitOverride",
    )

    # When the backend omits the flags, an override is active iff its value is present.
    has_base_unit_override: bool | None = Field(
        None,
        validation_alias=AliasChoices(
            "hasBaseUnitOverride", "hasSpecialPrice", "has_base_unit_override"
        ),
        serialization_alias="hasBaseUnitOverride",
    )
    has_second_unit_override: bool | None = Field(
        None,
        validation_alias=AliasChoices(
            "hasSecondUnitOverride", "hasBoxSpecialPrice", "has_second_unit_override"
        ),
        serialization_alias="hasSecondUnitOverride",
    )


class CustomerV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    phone: str | None = None
    address: str | None = None
    current_balance: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("currentBalance", "current_balance"),
        serialization_alias="currentBalance",
    )
    credit_limit: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("creditLimit", "credit_limit"),
        serialization_alias="creditLimit",
    )
