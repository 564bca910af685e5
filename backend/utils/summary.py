# backend/utils/summary.py
"""Flat table rows describing catalog listings, for debug logging."""
import logging
from typing import Dict, List, Sequence

NONE = "None"
NA = "N/A"


def _names(items) -> str:
    names = [item.name for item in items]
    return ", ".join(names) if names else NONE


def all_categories_rows(categories: Sequence) -> List[Dict]:
    return [
        {"category": c.name, "c_id": c.id, "products": _names(c.products)}
        for c in categories
    ]


def single_category_rows(category) -> List[Dict]:
    if not category.products:
        return [{"product": NONE, "p_id": NA, "price": NA, "stock": NA}]
    return [
        {"product": p.name, "p_id": p.id, "price": p.price, "stock": p.stock}
        for p in category.products
    ]


def all_products_rows(products: Sequence) -> List[Dict]:
    rows = []
    for p in products:
        rows.append({
            "product": p.name,
            "p_id": p.id,
            "price": p.price,
            "stock": p.stock,
            "tags": _names(p.tags),
            "category": p.category.name if p.category else NA,
            "c_id": p.category_id if p.category_id is not None else NA,
        })
    return rows


def single_product_rows(product) -> List[Dict]:
    return [{
        "tags": _names(product.tags),
        "price": product.price,
        "stock": product.stock,
        "category": product.category.name if product.category else NA,
        "c_id": product.category_id if product.category_id is not None else NA,
    }]


def all_tags_rows(tags: Sequence) -> List[Dict]:
    return [{"tag": t.name, "t_id": t.id, "products": _names(t.products)} for t in tags]


def single_tag_rows(tag) -> List[Dict]:
    if not tag.products:
        return [{"product": NONE, "p_id": NA, "price": NA, "stock": NA}]
    return [
        {"product": p.name, "p_id": p.id, "price": p.price, "stock": p.stock}
        for p in tag.products
    ]


def render_table(rows: List[Dict]) -> str:
    """Plain-text table, one line per row, columns padded to the widest cell."""
    if not rows:
        return ""
    columns = list(rows[0].keys())
    widths = {
        col: max(len(str(col)), *(len(str(row.get(col, ""))) for row in rows))
        for col in columns
    }
    header = " | ".join(str(col).ljust(widths[col]) for col in columns)
    rule = "-+-".join("-" * widths[col] for col in columns)
    lines = [header, rule]
    for row in rows:
        lines.append(" | ".join(str(row.get(col, "")).ljust(widths[col]) for col in columns))
    return "\n".join(lines)


def log_table(logger: logging.Logger, title: str, rows: List[Dict]) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s\n%s", title, render_table(rows))
