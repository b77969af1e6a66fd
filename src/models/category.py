from pydantic import BaseModel, ConfigDict


class Category(BaseModel):
    """Категория расходов из справочника API."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str | None = None


def get_category_by_id(categories, category_id: int) -> Category | None:
    for cat in categories:
        if cat.id == category_id:
            return cat
    return None


def category_names(categories) -> dict[int, str]:
    return {cat.id: cat.name for cat in categories}
