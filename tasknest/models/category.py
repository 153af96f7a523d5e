from enum import Enum
from typing import Dict, List, NamedTuple, Tuple


class TaskCategory(str, Enum):
    personal = "personal"
    work = "work"
    shopping = "shopping"
    health = "health"
    other = "other"


class TaskFilter(str, Enum):
    """Selectable views over a task list: every category plus two status views."""

    all = "all"
    personal = "personal"
    work = "work"
    shopping = "shopping"
    health = "health"
    other = "other"
    completed = "completed"


class CategoryStyle(NamedTuple):
    label: str
    icon: str
    color: str


CATEGORY_STYLES: Dict[TaskCategory, CategoryStyle] = {
    TaskCategory.personal: CategoryStyle("Personal", "person", "#FF6B6B"),
    TaskCategory.work: CategoryStyle("Work", "briefcase", "#4ECDC4"),
    TaskCategory.shopping: CategoryStyle("Shopping", "cart", "#FFD166"),
    TaskCategory.health: CategoryStyle("Health", "fitness", "#06D6A0"),
    TaskCategory.other: CategoryStyle("Other", "apps", "#A78BFA"),
}

# Display order of the filter bar
FILTER_STYLES: List[Tuple[TaskFilter, CategoryStyle]] = (
    [(TaskFilter.all, CategoryStyle("All", "apps", "#888"))]
    + [(TaskFilter(category.value), style) for category, style in CATEGORY_STYLES.items()]
    + [(TaskFilter.completed, CategoryStyle("Completed", "checkmark-done", "#06D6A0"))]
)
