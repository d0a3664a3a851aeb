"""SQLAlchemy-backed stock ledger.

Stock lives in a ``stock_levels`` table. ``reserve`` is a single conditional
``UPDATE ... SET stock = stock - :q WHERE product_id = :id AND stock >= :q``;
the database's row locking makes the check and the decrement one step, so
concurrent checkouts in separate processes cannot oversell.
"""

import structlog
from protean.exceptions import ValidationError
from sqlalchemy import CheckConstraint, Integer, String, create_engine, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from storefront.errors import InsufficientStock, ProductNotFound
from storefront.inventory.port import StockLedger

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    pass


class StockLevel(Base):
    __tablename__ = "stock_levels"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_stock_levels_non_negative"),)

    product_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class SqlStockLedger(StockLedger):
    def __init__(self, database_uri: str | None = None, engine: Engine | None = None) -> None:
        if engine is None:
            engine = create_engine(database_uri or "sqlite:///stock.db")
        self.engine = engine
        Base.metadata.create_all(self.engine)

    def _current(self, session: Session, product_id: str) -> int:
        stock = session.scalar(select(StockLevel.stock).where(StockLevel.product_id == product_id))
        if stock is None:
            raise ProductNotFound({"product_id": [f"No stock record for product {product_id}"]})
        return stock

    def reserve(self, product_id: str, quantity: int) -> int:
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        product_id = str(product_id)

        with Session(self.engine) as session, session.begin():
            result = session.execute(
                update(StockLevel)
                .where(StockLevel.product_id == product_id, StockLevel.stock >= quantity)
                .values(stock=StockLevel.stock - quantity)
            )
            if result.rowcount == 0:
                available = self._current(session, product_id)
                raise InsufficientStock(
                    {"quantity": [f"Insufficient stock: {available} available, {quantity} requested"]}
                )
            remaining = self._current(session, product_id)

        logger.debug("Stock reserved", product_id=product_id, quantity=quantity, remaining=remaining)
        return remaining

    def release(self, product_id: str, quantity: int) -> int:
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        product_id = str(product_id)

        with Session(self.engine) as session, session.begin():
            result = session.execute(
                update(StockLevel)
                .where(StockLevel.product_id == product_id)
                .values(stock=StockLevel.stock + quantity)
            )
            if result.rowcount == 0:
                raise ProductNotFound({"product_id": [f"No stock record for product {product_id}"]})
            return self._current(session, product_id)

    def available(self, product_id: str) -> int:
        with Session(self.engine) as session:
            return self._current(session, str(product_id))

    def set_stock(self, product_id: str, quantity: int) -> None:
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Stock cannot be negative"]})
        with Session(self.engine) as session, session.begin():
            session.merge(StockLevel(product_id=str(product_id), stock=quantity))
