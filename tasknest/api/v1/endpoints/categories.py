from fastapi import APIRouter
from typing import List

from tasknest.models.category import CATEGORY_STYLES, FILTER_STYLES
from tasknest.schemas.task import CategoryRead

router = APIRouter()


@router.get("/", response_model=List[CategoryRead])
def list_categories():
    return [
        CategoryRead(id=category.value, label=style.label, icon=style.icon, color=style.color)
        for category, style in CATEGORY_STYLES.items()
    ]


@router.get("/filters", response_model=List[CategoryRead])
def list_filters():
    return [
        CategoryRead(id=key.value, label=style.label, icon=style.icon, color=style.color)
        for key, style in FILTER_STYLES
    ]
