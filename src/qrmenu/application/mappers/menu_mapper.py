from __future__ import annotations

from qrmenu.application.dto.responses import (
    CategoryResponse,
    ProductResponse,
    PublicMenuResponse,
    SubCategoryResponse,
    VenueResponse,
)
from qrmenu.domain.common.text import capitalize_words
from qrmenu.domain.menu.entities import Category, Product, SubCategory, Venue


def to_venue_response(venue: Venue) -> VenueResponse:
    return VenueResponse(
        id=str(venue.venue_id),
        name=venue.name,
        slug=venue.slug,
        announcement=venue.announcement,
        openingHours=venue.opening_hours,
    )


def to_category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=str(category.category_id),
        venueId=str(category.venue_id),
        name=category.name,
        slug=category.slug,
        imageUrl=category.image_url,
        displayOrder=category.display_order,
        isVisible=category.is_visible,
    )


def to_sub_category_response(sub_category: SubCategory) -> SubCategoryResponse:
    return SubCategoryResponse(
        id=str(sub_category.sub_category_id),
        venueId=str(sub_category.venue_id),
        categoryId=str(sub_category.category_id),
        name=sub_category.name,
        slug=sub_category.slug,
        displayOrder=sub_category.display_order,
        isVisible=sub_category.is_visible,
    )


def to_product_response(product: Product, display_name: bool = False) -> ProductResponse:
    return ProductResponse(
        id=str(product.product_id),
        venueId=str(product.venue_id),
        name=capitalize_words(product.name) if display_name else product.name,
        slug=product.slug,
        category=product.category,
        categoryId=product.category_id,
        subCategoryId=product.sub_category_id,
        description=product.description,
        priceCents=product.price_cents,
        imageUrl=product.image_url,
        isActive=product.is_active,
        isInStock=product.is_in_stock,
        dietTags=sorted(product.diet_tags),
    )


def to_public_menu_response(
    venue: Venue,
    categories: list[Category],
    sub_categories: list[SubCategory],
    products: list[Product],
) -> PublicMenuResponse:
    return PublicMenuResponse(
        venue=to_venue_response(venue),
        categories=[to_category_response(category) for category in categories],
        subCategories=[to_sub_category_response(item) for item in sub_categories],
        products=[to_product_response(product, display_name=True) for product in products],
    )
