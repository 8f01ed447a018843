from fastapi import Depends, HTTPException, status
from app.utils.get_user import get_current_user
from app.models.users.user_models import User
from app.constants.user_roles import UserRole


def require_role(roles: list[UserRole]):
    # admin passes every guard
    allowed = {UserRole(r).value for r in roles} | {UserRole.admin.value}

    async def role_checker(user: User = Depends(get_current_user)):
        if user.role.lower() not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.role}' may not perform this action"
            )
        return user
    return role_checker
