from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


variant_option_values = Table(
    "variant_option_values",
    Base.metadata,
    Column("variant_id", Integer, ForeignKey("variants.id"), primary_key=True),
    Column("option_value_id", Integer, ForeignKey("option_values.id"), primary_key=True),
)


class Taxon(Base):
    __tablename__ = "taxons"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(Integer, ForeignKey("taxons.id"))

    parent = relationship("Taxon", remote_side=[id], back_populates="children")
    children = relationship("Taxon", back_populates="parent")
    classifications = relationship("Classification", back_populates="taxon")

    @property
    def self_and_ancestors(self):
        nodes = []
        node = self
        while node is not None:
            nodes.append(node)
            node = node.parent
        return nodes


class Classification(Base):
    __tablename__ = "classifications"
    __table_args__ = (UniqueConstraint("product_id", "taxon_id"),)

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    taxon_id = Column(Integer, ForeignKey("taxons.id"), nullable=False)
    position = Column(Integer, default=0)

    product = relationship("Product", back_populates="classifications")
    taxon = relationship("Taxon", back_populates="classifications")


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True)
    name = Column(String(128), unique=True, nullable=False)


class ProductProperty(Base):
    __tablename__ = "product_properties"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    value = Column(String(255))
    position = Column(Integer, default=0)

    product = relationship("Product", back_populates="product_properties")
    property = relationship("Property")


class OptionValue(Base):
    __tablename__ = "option_values"

    id = Column(Integer, primary_key=True)
    name = Column(String(128), nullable=False)
    presentation = Column(String(255))


class Variant(Base):
    __tablename__ = "variants"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    sku = Column(String(64), default="")
    price = Column(Numeric(10, 2))
    is_master = Column(Boolean, default=False)
    position = Column(Integer, default=0)

    product = relationship("Product", back_populates="variants_including_master")
    option_values = relationship("OptionValue", secondary=variant_option_values)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    available_on = Column(DateTime)
    discontinue_on = Column(DateTime)

    variants_including_master = relationship(
        "Variant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Variant.position",
    )
    classifications = relationship(
        "Classification",
        back_populates="product",
        cascade="all, delete-orphan",
    )
    product_properties = relationship(
        "ProductProperty",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductProperty.position",
    )

    @property
    def master(self):
        for variant in self.variants_including_master:
            if variant.is_master:
                return variant
        return None

    @property
    def taxons(self):
        return [classification.taxon for classification in self.classifications if classification.taxon]

    @property
    def variants(self):
        return [variant for variant in self.variants_including_master if not variant.is_master]

    @property
    def price(self):
        master = self.master
        return master.price if master is not None else None

    @property
    def sku(self):
        master = self.master
        return master.sku if master is not None else None
