"""
Product Model for Store Map Service.

Represents an item placed in a sector. Products are leaf entities.
"""

from storemap.models import db


class Product(db.Model):
    """
    SQLAlchemy model representing a product shelved in a sector.

    Attributes:
        id: Auto-increment identifier
        sector_id: Foreign key to the sector the product is placed in
        name: Product name
        description: Optional description
        price: Non-negative price with two decimal places
    """

    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    sector_id = db.Column(db.Integer, db.ForeignKey('sectors.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True, default='')
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False, default=0)

    def to_dict(self):
        """Convert product to dictionary."""
        return {
            'id': self.id,
            'sector_id': self.sector_id,
            'name': self.name,
            'description': self.description,
            'price': float(self.price) if self.price is not None else None,
        }

    def __repr__(self):
        return f'<Product {self.id} {self.name!r}>'
