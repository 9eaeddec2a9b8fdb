from pydantic import BaseModel

from app.models.user import Role


# 🔹 관리자 role 변경 요청용
class RoleUpdate(BaseModel):
    role: Role
