"""
Category Store.

Per-user categories. Notes point at a category through their ``color``
field; deleting a category leaves those references dangling.
"""

from collections import Counter
from collections.abc import Iterable

from noteflow.core.exceptions import ConflictError, ValidationError
from noteflow.core.utils import generate_id
from noteflow.models.category import Category
from noteflow.models.note import Note
from noteflow.repositories.base import KeyValueStore
from noteflow.repositories.collection import categories_key
from noteflow.services.base import BaseService

DEFAULT_PALETTE: tuple[str, ...] = (
    "indigo", "purple", "pink", "blue", "green", "yellow", "red", "gray",
)

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="1", name="Work", color="indigo"),
    Category(id="2", name="Personal", color="purple"),
    Category(id="3", name="Study", color="pink"),
    Category(id="4", name="Shopping", color="green"),
    Category(id="5", name="Health", color="red"),
)


class CategoryStore(BaseService):
    """Store for one user's categories."""

    def __init__(
        self,
        storage: KeyValueStore,
        user_id: str,
        *,
        key_prefix: str = "",
        palette: list[str] | tuple[str, ...] = DEFAULT_PALETTE,
        defaults: list[Category] | tuple[Category, ...] = DEFAULT_CATEGORIES,
    ) -> None:
        super().__init__(storage, key_prefix)
        self.user_id = user_id
        self.palette = tuple(palette)
        self._repo = self._collection(Category)

        key = categories_key(user_id)
        if self._repo.exists(key):
            self._categories: list[Category] = self._repo.read(key)
        else:
            self._categories = [c.model_copy() for c in defaults]

    def _save(self) -> None:
        self._repo.write(categories_key(self.user_id), self._categories)

    def list(self) -> list[Category]:
        return [c.model_copy() for c in self._categories]

    def get(self, category_id: str) -> Category | None:
        category = next((c for c in self._categories if c.id == category_id), None)
        return category.model_copy() if category is not None else None

    def create(self, name: str, color: str) -> Category:
        """
        Add a category.

        Raises:
            ValidationError: If the name is blank or the color is not in the palette
            ConflictError: If a category with the same name exists, ignoring case
        """
        name = name.strip()
        self._validate_required({"name": name}, ["name"])
        if color not in self.palette:
            raise ValidationError(
                f"Unknown color: {color}",
                details={"field": "color", "allowed": list(self.palette)},
            )
        if any(c.name.casefold() == name.casefold() for c in self._categories):
            raise ConflictError(f"Category already exists: {name}")

        category = Category(id=generate_id(), name=name, color=color)
        self._categories.append(category)
        self._save()

        self._log_operation("Category created", category_id=category.id)
        return category.model_copy()

    def delete(self, category_id: str) -> bool:
        remaining = [c for c in self._categories if c.id != category_id]
        if len(remaining) == len(self._categories):
            self._log_debug("Delete skipped, category not found", category_id=category_id)
            return False
        self._categories = remaining
        self._save()

        self._log_operation("Category deleted", category_id=category_id)
        return True

    def counts(self, notes: Iterable[Note]) -> dict[str, int]:
        """Number of notes per category id, zero for unused categories."""
        tally = Counter(n.color for n in notes if n.color)
        return {c.id: tally.get(c.id, 0) for c in self._categories}
