"""
Domain models for the user seed service.

Mirrors the `public.users` table. Attributes are snake_case in Python and
serialize with the camelCase names the HTTP surface exposes (`firstName`,
`hasProblems`, ...).
"""
from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NewUser(BaseModel):
    """
    A user row before insertion; `id` is assigned by the store.
    """

    first_name: str = Field(..., description="Free-text first name.")
    last_name: str = Field(..., description="Free-text last name.")
    age: int = Field(..., description="Age in years; the generator keeps it within 0-99.")
    gender: str = Field(..., description="Categorical gender label.")
    has_problems: bool = Field(False, description="Problems flag cleared by the reset operation.")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def as_row(self) -> Tuple[str, str, int, str, bool]:
        """Values in `USER_COLUMNS` order."""
        return (self.first_name, self.last_name, self.age, self.gender, self.has_problems)


USER_COLUMNS: Tuple[str, ...] = ("first_name", "last_name", "age", "gender", "has_problems")


__all__ = ["NewUser", "USER_COLUMNS"]
