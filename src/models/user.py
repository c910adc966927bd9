"""
User Pydantic models
"""

from typing import Optional
from pydantic import BaseModel, StrictInt, StrictStr


class User(BaseModel):
    id: int
    name: str
    age: int


class UserCreateRequest(BaseModel):
    """
    Body of POST /users

    Only the JSON shape is checked here. Age and name bounds are left to the
    table constraints so a rejected write surfaces as a constraint violation.
    """
    name: StrictStr
    age: Optional[StrictInt] = None
