"""GraphQL schema and resolvers (Strawberry)."""

import strawberry

from .users import User, UserService


@strawberry.type(name="User")
class UserType:
    """GraphQL view of a user."""

    id: strawberry.ID
    name: str
    email: str

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(id=strawberry.ID(user.id), name=user.name, email=user.email)


@strawberry.type
class Query:
    @strawberry.field(description="Look up a user by id; null when it does not exist.")
    async def get_user(self, info: strawberry.Info, id: strawberry.ID) -> UserType | None:
        users: UserService = info.context["users"]
        user = await users.get_user(str(id))
        return UserType.from_model(user) if user else None


schema = strawberry.Schema(query=Query)
