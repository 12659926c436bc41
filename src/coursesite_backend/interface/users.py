from pydantic import BaseModel, Field, EmailStr, field_validator


class UserContext(BaseModel):
    user_id: int = Field(description="User id, 0 for guests")
    is_guest: bool
    is_admin: bool
    first_name: str
    last_name: str
    full_name: str
    email: str = Field("", description="Only filled in for the user themself and admins")
    email_verified: bool = False


class UserCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=255)
    is_admin: bool = False

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be empty or only whitespace')
        return v.strip()


class UserPasswordUpdate(BaseModel):
    password: str = Field(min_length=8, max_length=255)


class UserEmailUpdate(BaseModel):
    email: EmailStr


class EmailVerification(BaseModel):
    code: str = Field(min_length=1, max_length=64)
