# backend/models/category.py
from sqlalchemy import Column, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Category groups products (one category -> many products).
# Deleting a category does not cascade at the database level; what happens
# to its products is decided by the configured delete policy.
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), CheckConstraint("length(name) > 0"), unique=True, nullable=False, index=True)

    products = relationship("Product", back_populates="category", order_by="Product.id")
