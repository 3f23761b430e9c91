"""Pydantic models for the Invapi invoice document and its tool inputs.

Validation here is structural only: required fields, primitive types, enums
and lengths. Cross-field arithmetic (e.g. totals against line items) is left
to the remote service.
"""
from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictStr,
    ValidationError,
    conlist,
    field_validator,
)

InvoiceType = Literal["incoming", "outgoing"]
PaymentType = Literal["credit_card", "credit_transfer", "cash", "online_payment_service"]
VatCategoryCode = Literal["S", "Z", "E", "AE", "K", "G", "O", "L", "M"]

MAX_BATCH_OPERATIONS = 100

_DATE_HINT = "(YYYY-MM-DD)"


class _Document(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire, leaving out fields the caller never set."""
        return self.model_dump(mode="json", exclude_unset=True)


class PostalAddress(_Document):
    address_line_1: StrictStr = Field(description="Street address line 1")
    address_line_2: StrictStr | None = Field(default=None, description="Street address line 2")
    address_line_3: StrictStr | None = Field(default=None, description="Street address line 3")
    city: StrictStr = Field(description="City name")
    post_code: StrictStr = Field(description="Postal / ZIP code")
    country_subdivision: StrictStr | None = Field(
        default=None, description="State / province / region"
    )
    country_code: StrictStr = Field(
        min_length=2,
        max_length=2,
        description="ISO 3166-1 alpha-2 country code, e.g. 'DE', 'US', 'FR'",
    )


class Contact(_Document):
    telephone_number: StrictStr | None = Field(default=None, description="Phone number")
    email_address: StrictStr | None = Field(default=None, description="Email address")


class Party(_Document):
    name: StrictStr = Field(description="Full formal name of the party")
    postal_address: PostalAddress
    vat_identifier: StrictStr | None = Field(
        default=None, description="VAT identification number"
    )
    contact: Contact


class PriceDetails(_Document):
    item_price_without_vat: StrictFloat = Field(description="Unit price without VAT")
    item_price_discount: StrictFloat | None = Field(default=None, description="Discount per unit")
    item_price_with_vat: StrictFloat = Field(description="Unit price with VAT")
    item_vat_percentage: StrictFloat = Field(description="VAT rate as percentage, e.g. 19")
    vat_category_code: VatCategoryCode = Field(
        description=(
            "VAT category: S=Standard, Z=Zero-rated, E=Exempt, AE=Reverse charge, "
            "K=Intra-community, G=Export, O=Outside scope, L=Canary Islands, "
            "M=Ceuta/Melilla"
        )
    )


class InvoiceItem(_Document):
    item_identifier: StrictStr = Field(description="Unique line-item identifier")
    item_quantity: StrictFloat = Field(description="Quantity of items")
    item_quantity_unit_of_measure_code: StrictStr = Field(
        description=(
            "UN/ECE Recommendation 20 unit code, e.g. 'C62' (unit), 'HUR' (hour), "
            "'KGM' (kg)"
        )
    )
    item_total_amount_with_vat: StrictFloat = Field(description="Total line amount including VAT")
    item_total_amount_without_vat: StrictFloat | None = Field(
        default=None, description="Total line amount excluding VAT"
    )
    price_details: PriceDetails
    item_information: StrictStr | None = Field(
        default=None, description="Description of the item or service"
    )


class InvoicingPeriod(_Document):
    start: StrictStr = Field(description=f"Period start date {_DATE_HINT}")
    end: StrictStr = Field(description=f"Period end date {_DATE_HINT}")


class AdditionalData(_Document):
    reverse_charge: StrictBool | None = Field(
        default=None, description="True if VAT reverse charge applies"
    )
    leitweg_id: StrictStr | None = Field(
        default=None, description="Leitweg-ID for German government invoicing"
    )
    customer_id: StrictStr | None = None
    order_id: StrictStr | None = None
    delivery_id: StrictStr | None = None
    project: StrictStr | None = Field(default=None, description="Project reference")
    # Remote field name, spelling included.
    preceeding_invoice_number: StrictStr | None = None
    invoicing_period: InvoicingPeriod | None = None


class DeliveryInformation(_Document):
    deliver_to: StrictStr | None = Field(default=None, description="Delivery recipient name")
    deliver_to_address: PostalAddress | None = None
    delivery_date: StrictStr | None = Field(default=None, description=f"Delivery date {_DATE_HINT}")
    delivery_method: StrictStr | None = None
    delivery_instructions: StrictStr | None = None


class PaymentInformation(_Document):
    payment_type: PaymentType | None = Field(default=None, description="Payment method")
    payment_reference: StrictStr | None = None
    payment_instructions: StrictStr | None = None
    payment_account_number: StrictStr | None = Field(
        default=None, description="IBAN or account number"
    )
    credit_card_number: StrictStr | None = None
    credit_card_type: StrictStr | None = None
    payment_due_date: StrictStr | None = Field(default=None, description=f"Due date {_DATE_HINT}")
    payment_payed_date: StrictStr | None = Field(
        default=None, description=f"Date payment was made {_DATE_HINT}"
    )
    payment_terms: StrictStr | None = None


class Totals(_Document):
    total_amount_without_vat: StrictFloat = Field(description="Sum of all line items without VAT")
    total_amount_with_vat: StrictFloat = Field(description="Sum of all line items with VAT")
    total_vat_amount: StrictFloat = Field(description="Total VAT amount")
    amount_due_for_payment: StrictFloat = Field(description="Amount due for payment")
    paid_amount: StrictFloat = Field(description="Amount already paid")
    sum_of_allowances: StrictFloat | None = None
    sum_of_charges: StrictFloat | None = None
    invoice_total_without_vat: StrictFloat | None = None
    rounding_amount: StrictFloat | None = None


class Invoice(_Document):
    invoice_number: StrictStr = Field(description="Unique invoice identifier, e.g. 'INV-2025-001'")
    invoice_date: StrictStr = Field(description=f"Issue date {_DATE_HINT}")
    invoice_currency_code: StrictStr = Field(
        description="ISO 4217 currency code, e.g. 'EUR', 'USD', 'GBP'"
    )
    invoice_type: InvoiceType = Field(
        description="'incoming' = received from vendor/supplier; 'outgoing' = sent to customer"
    )
    invoice_note: StrictStr | None = None
    additional_data: AdditionalData | None = None
    seller: Party = Field(description="The party issuing the invoice")
    buyer: Party = Field(description="The party receiving the invoice")
    delivery_information: DeliveryInformation | None = None
    payment_information: PaymentInformation
    totals: Totals
    items: conlist(InvoiceItem, min_length=1) = Field(
        description="Invoice line items (at least 1)"
    )
    invoice_description: StrictStr = Field(description="Short description of the invoice")
    category: StrictStr | None = Field(default=None, description="Invoice category")
    id: StrictStr | None = None


# Extraction inputs


class ExtractionParty(Party):
    """Known seller/buyer handed to the extractor as a hint."""


class Category(_Document):
    id: StrictStr = Field(description="Category identifier")
    name: StrictStr = Field(description="Category name")
    description: StrictStr = Field(description="What this category represents")


# Batch operations: one variant per operation kind, discriminated on `operation`.


class _BatchOperationBase(_Document):
    id: StrictStr = Field(description="Unique identifier for this operation (returned in results)")


class JsonToUblOperation(_BatchOperationBase):
    operation: Literal["json_to_ubl"]
    input: Invoice = Field(description="Invoice to convert to UBL XML")


class JsonToCiiOperation(_BatchOperationBase):
    operation: Literal["json_to_cii"]
    input: Invoice = Field(description="Invoice to convert to CII XML")


class UblToJsonOperation(_BatchOperationBase):
    operation: Literal["ubl_to_json"]
    input: StrictStr = Field(description="UBL XML string")


class CiiToJsonOperation(_BatchOperationBase):
    operation: Literal["cii_to_json"]
    input: StrictStr = Field(description="CII XML string")


class ZugferdToJsonOperation(_BatchOperationBase):
    operation: Literal["zugferd_to_json"]
    input: StrictStr = Field(description="ZUGFeRD invoice data")


BatchOperation = Annotated[
    Union[
        JsonToUblOperation,
        JsonToCiiOperation,
        UblToJsonOperation,
        CiiToJsonOperation,
        ZugferdToJsonOperation,
    ],
    Field(discriminator="operation"),
]


class BatchRequest(_Document):
    operations: conlist(
        BatchOperation, min_length=1, max_length=MAX_BATCH_OPERATIONS
    ) = Field(description="Array of conversion operations to perform")


# Remote response shapes. These tolerate keys the service may add later.


class _Response(BaseModel):
    model_config = ConfigDict(extra="allow")


class ValidationMessage(_Response):
    message: str | None = None


class ValidationReport(_Response):
    valid: bool = False
    errors: list[ValidationMessage] | None = None


class UserCredits(_Response):
    extraction: int | None = None
    conversion: int | None = None
    validation: int | None = None
    qr: int | None = None


class UserInfo(_Response):
    email: str | None = None
    role: str | None = None
    credits: UserCredits = Field(default_factory=UserCredits)


class BatchItemResult(_Response):
    id: str | int | None = None
    success: bool = False
    output: Any = None
    error: str | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _error_text(cls, value: Any) -> Any:
        return _describe_error(value)


class BatchSummary(_Response):
    total: int
    successful: int
    failed: int | None = None
    processing_time_ms: int | float | None = None


class BatchResponse(_Response):
    results: list[BatchItemResult] = Field(default_factory=list)
    summary: BatchSummary | None = None

    @field_validator("results", mode="before")
    @classmethod
    def _parse_rows(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [_parse_row(row) for row in value]


def _describe_error(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("message"), str):
        return value["message"]
    return json.dumps(value, ensure_ascii=False, default=str)


def _parse_row(row: Any) -> BatchItemResult:
    """Parse one batch row; a malformed row becomes a failure of its own."""

    try:
        return BatchItemResult.model_validate(row)
    except ValidationError:
        entry = row if isinstance(row, dict) else {}
        row_id = entry.get("id")
        return BatchItemResult(
            id=row_id if isinstance(row_id, (str, int)) else None,
            error=_describe_error(entry.get("error", row)),
        )


def _dotted(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc) or "(root)"


def format_validation_errors(error: ValidationError) -> list[str]:
    """Render every violated field as ``dotted.path: reason``."""

    return [f"{_dotted(item['loc'])}: {item['msg']}" for item in error.errors()]


__all__ = [
    "AdditionalData",
    "BatchItemResult",
    "BatchOperation",
    "BatchRequest",
    "BatchResponse",
    "BatchSummary",
    "Category",
    "CiiToJsonOperation",
    "Contact",
    "DeliveryInformation",
    "ExtractionParty",
    "Invoice",
    "InvoiceItem",
    "InvoiceType",
    "InvoicingPeriod",
    "JsonToCiiOperation",
    "JsonToUblOperation",
    "MAX_BATCH_OPERATIONS",
    "Party",
    "PaymentInformation",
    "PaymentType",
    "PostalAddress",
    "PriceDetails",
    "Totals",
    "UblToJsonOperation",
    "UserCredits",
    "UserInfo",
    "ValidationMessage",
    "ValidationReport",
    "VatCategoryCode",
    "ZugferdToJsonOperation",
    "format_validation_errors",
]
