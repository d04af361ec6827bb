from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """Базовый класс моделей: имя таблицы по умолчанию — имя класса в нижнем регистре."""

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
