# backend/models/product.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# A product belongs to one category and carries any number of tags
# through ProductTag association rows.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), CheckConstraint("length(name) > 0"), nullable=False, index=True)

    # Price is returned as float so request values compare directly against stored ones
    price = Column(Numeric(10, 2, asdecimal=False), CheckConstraint("price >= 0"), nullable=False)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=10)

    # Nullable only so a deleted category can leave its products orphaned
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    category = relationship("Category", back_populates="products")

    tag_links = relationship(
        "ProductTag", back_populates="product",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    tags = relationship(
        "Tag", secondary="product_tags",
        order_by="Tag.id", viewonly=True,
    )
