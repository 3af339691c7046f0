"""Client-side view of a logged-in user, as the API returns it."""

from pydantic import BaseModel


class RestaurantRef(BaseModel):
    id: str
    name: str


class SessionUser(BaseModel):
    id: str
    name: str
    email: str
    role: str
    restaurant: RestaurantRef


class LoginResult(BaseModel):
    message: str = ""
    token: str
    user: SessionUser
