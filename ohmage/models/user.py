# SPDX-License-Identifier: Apache-2.0
"""User, personal information, campaign role and class membership models."""
from sqlmodel import Field, SQLModel

from ohmage.core.roles import ClassRole, Role


class User(SQLModel, table=True):
    __tablename__ = "users"
    username: str = Field(primary_key=True, max_length=255)
    email_address: str | None = None
    admin: bool = False
    enabled: bool = True
    campaign_creation_privilege: bool = False


class UserPersonal(SQLModel, table=True):
    __tablename__ = "user_personal"
    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(foreign_key="users.username", unique=True)
    first_name: str = ""
    last_name: str = ""
    organization: str = ""
    personal_id: str = ""


class UserCampaignRole(SQLModel, table=True):
    __tablename__ = "user_campaign_roles"
    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(foreign_key="users.username", index=True)
    campaign_id: str = Field(foreign_key="campaigns.id", index=True)
    role: Role


class UserClass(SQLModel, table=True):
    __tablename__ = "user_classes"
    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(foreign_key="users.username", index=True)
    class_id: str = Field(index=True)
    role: ClassRole = ClassRole.RESTRICTED
