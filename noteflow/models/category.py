"""
Category Model.

Notes reference a category through their ``color`` field, which holds
the category id.
"""

from noteflow.models.base import CamelModel


class Category(CamelModel):
    id: str
    name: str
    color: str
