from models.category import Category
from models.product import Product
from models.tag import Tag
from models.product_tag import ProductTag
from models.log import Log

__all__ = ["Category", "Product", "Tag", "ProductTag", "Log"]
