"""Input data transfer objects for catalog writes.

A ``ProductPayload`` is always the complete desired state of a product.
``normalize_payload`` applies every rule that needs no storage lookup;
reference checks happen inside the write transaction.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal

from catalog_engine.domain import (
    ProductStatus,
    ProductType,
    StockLevel,
    normalize_country_code,
)
from catalog_engine.domain.exceptions import ValidationError


# ============================================================================
# Payload Data Transfer Objects
# ============================================================================


@dataclass
class StockInput:
    """Stock for one country.

    Attributes:
        country_code: Two-letter country code.
        stock_level: Units on hand; ignored when stock is not managed.
        visibility: Whether the variant is listed in that country.
        manage_stock: Whether stock is tracked.
        allow_backorder: Whether orders are accepted at zero stock.
    """

    country_code: str
    stock_level: int | None = 0
    visibility: bool = True
    manage_stock: bool = True
    allow_backorder: bool = False

    @property
    def level(self) -> StockLevel:
        """Stock level this input resolves to."""
        return StockLevel.from_input(self.stock_level, self.manage_stock)


@dataclass
class VariationTermInput:
    """Term chosen for one variation attribute."""

    attribute_id: str
    term_id: str


@dataclass
class VariationInput:
    """One caller-supplied variant of a variable product."""

    sku: str | None = None
    price: Decimal | None = None
    image_url: str | None = None
    terms: list[VariationTermInput] = field(default_factory=list)
    stock: list[StockInput] = field(default_factory=list)


@dataclass
class AttributeInput:
    """Attribute assigned to a product, with its selected terms."""

    attribute_id: str
    used_for_variation: bool = False
    terms: list[str] = field(default_factory=list)


@dataclass
class ProductPayload:
    """Complete desired state of a product.

    Attributes:
        name: Display name.
        type: simple or variable.
        status: draft, published or archived.
        description: Free-form description.
        sku: Parent SKU (mirrored on the variant of a simple product).
        price: Price of a simple product.
        image_url: Parent image.
        categories: Category ids.
        attributes: Assigned attributes with their terms.
        variations: Variants of a variable product.
        stock: Stock of the single variant of a simple product.
    """

    name: str
    type: ProductType | str
    status: ProductStatus | str = ProductStatus.DRAFT
    description: str | None = None
    sku: str | None = None
    price: Decimal | None = None
    image_url: str | None = None
    categories: list[str] = field(default_factory=list)
    attributes: list[AttributeInput] = field(default_factory=list)
    variations: list[VariationInput] = field(default_factory=list)
    stock: list[StockInput] = field(default_factory=list)

    @property
    def product_type(self) -> ProductType:
        return ProductType(self.type)

    @property
    def product_status(self) -> ProductStatus:
        return ProductStatus(self.status)

    @property
    def variation_attribute_ids(self) -> list[str]:
        """Ids of attributes flagged for variation, in payload order."""
        return [a.attribute_id for a in self.attributes if a.used_for_variation]


# ============================================================================
# Normalization
# ============================================================================


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _check_price(price: Decimal | None, field_name: str) -> Decimal:
    if price is None:
        raise ValidationError("Price is required", field=field_name)
    price = Decimal(price)
    if not price.is_finite():
        raise ValidationError(f"Price must be a finite number: {price}", field=field_name)
    if price < 0:
        raise ValidationError(f"Price cannot be negative: {price}", field=field_name)
    if price.normalize().as_tuple().exponent < -2:
        raise ValidationError(
            f"Price cannot have more than two decimal places: {price}", field=field_name
        )
    return price


def normalize_stock(entries: list[StockInput]) -> list[StockInput]:
    """Validate a stock list and collapse duplicate countries.

    The last entry for a country wins, as repeated upserts would.

    Args:
        entries: Stock inputs from the caller.

    Returns:
        One input per country, in first-seen order.

    Raises:
        ValidationError: On a bad country code or negative level.
    """
    by_country: dict[str, StockInput] = {}
    for entry in entries:
        code = normalize_country_code(entry.country_code)
        if entry.manage_stock and entry.stock_level is not None and entry.stock_level < 0:
            raise ValidationError(
                f"Stock level cannot be negative: {entry.stock_level}",
                field="stockLevel",
            )
        by_country[code] = replace(entry, country_code=code)
    return list(by_country.values())


def normalize_payload(payload: ProductPayload) -> ProductPayload:
    """Apply the storage-independent rules to a product payload.

    Args:
        payload: Payload as received.

    Returns:
        A normalized copy of the payload.

    Raises:
        ValidationError: If the payload breaks a rule.
    """
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Product name is required", field="name")

    try:
        product_type = ProductType(payload.type)
    except ValueError:
        raise ValidationError(f"Invalid product type: {payload.type}", field="type")
    try:
        status = ProductStatus(payload.status)
    except ValueError:
        raise ValidationError(f"Invalid product status: {payload.status}", field="status")

    seen_attributes: set[str] = set()
    attributes: list[AttributeInput] = []
    for attribute in payload.attributes:
        if attribute.attribute_id in seen_attributes:
            raise ValidationError(
                f"Attribute listed more than once: {attribute.attribute_id}",
                field="attributes",
            )
        seen_attributes.add(attribute.attribute_id)
        attributes.append(
            AttributeInput(
                attribute_id=attribute.attribute_id,
                used_for_variation=(
                    attribute.used_for_variation and product_type is ProductType.VARIABLE
                ),
                terms=_dedupe(attribute.terms),
            )
        )

    normalized = ProductPayload(
        name=name,
        type=product_type,
        status=status,
        description=payload.description,
        sku=payload.sku or None,
        image_url=payload.image_url,
        categories=_dedupe(payload.categories),
        attributes=attributes,
    )

    if product_type is ProductType.SIMPLE:
        normalized.price = _check_price(payload.price, "price")
        normalized.stock = normalize_stock(payload.stock)
        return normalized

    if not payload.variations:
        raise ValidationError(
            "Variable products need at least one variation", field="variations"
        )

    variation_attributes = set(normalized.variation_attribute_ids)
    seen_skus: set[str] = set()
    for index, variation in enumerate(payload.variations):
        sku = variation.sku or None
        if sku is not None:
            if sku in seen_skus:
                raise ValidationError(
                    f"Duplicate variation sku: {sku}", field=f"variations[{index}].sku"
                )
            seen_skus.add(sku)

        chosen: dict[str, str] = {}
        for term in variation.terms:
            if term.attribute_id not in variation_attributes:
                raise ValidationError(
                    f"Attribute {term.attribute_id} is not used for variation",
                    field=f"variations[{index}].terms",
                )
            if term.attribute_id in chosen:
                raise ValidationError(
                    f"Variation gives more than one term for attribute {term.attribute_id}",
                    field=f"variations[{index}].terms",
                )
            chosen[term.attribute_id] = term.term_id
        missing = variation_attributes - chosen.keys()
        if missing:
            raise ValidationError(
                f"Variation is missing terms for attributes: {', '.join(sorted(missing))}",
                field=f"variations[{index}].terms",
            )

        normalized.variations.append(
            VariationInput(
                sku=sku,
                price=_check_price(variation.price, f"variations[{index}].price"),
                image_url=variation.image_url,
                terms=[VariationTermInput(a, t) for a, t in chosen.items()],
                stock=normalize_stock(variation.stock),
            )
        )
    return normalized
