# backend/models/product_tag.py
from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

# Join row between a product and a tag. Rows are only ever inserted or
# deleted, never edited in place.
class ProductTag(Base):
    __tablename__ = "product_tags"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), index=True, nullable=False)

    product = relationship("Product", back_populates="tag_links")
    tag = relationship("Tag", back_populates="product_links")

    __table_args__ = (
        # A tag appears at most once per product
        UniqueConstraint("product_id", "tag_id", name="uq_product_tag_pair"),
    )
