# backend/models/tag.py
from sqlalchemy import Column, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), CheckConstraint("length(name) > 0"), unique=True, nullable=False, index=True)

    product_links = relationship(
        "ProductTag", back_populates="tag",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    products = relationship(
        "Product", secondary="product_tags",
        order_by="Product.id", viewonly=True,
    )
