from __future__ import annotations

from inventory_seeder.models import Record, Review


def format_number(value: float) -> str:
    """
    Render a number the way it reads in JSON: 100.0 -> "100", 4.5 -> "4.5".
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _review_sentence(review: Review) -> str:
    return f"Rated {format_number(review.rating)} on {review.review_date}: {review.comment}"


def build_embedding_text(record: Record) -> str:
    """
    Build the text that will be embedded for semantic search.

    Order is fixed: basic info, manufacturer, categories, reviews, price, notes.
    Changing it changes every stored embedding.
    """
    basic_info = f"{record.item_name} {record.item_description} from the brand {record.brand}"
    manufacturer = f"Made in {record.manufacturer_address.country}"
    categories = ", ".join(record.categories)
    reviews = " ".join(_review_sentence(r) for r in record.user_reviews)
    price = (
        f"At full price it costs: {format_number(record.prices.full_price)} USD, "
        f"On sale it costs: {format_number(record.prices.sale_price)} USD"
    )

    return (
        f"{basic_info}. Manufacturer: {manufacturer}. Categories: {categories}. "
        f"Reviews: {reviews}. Price: {price}. Notes: {record.notes}"
    )
