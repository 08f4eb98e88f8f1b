from jobmarket.schemas.common import CamelModel, SuccessResponse


class SignUpRequest(CamelModel):
    email: str
    password: str
    name: str
    user_type: str
    phone: str
    location: str
    business_name: str | None = None


class SignInRequest(CamelModel):
    email: str
    password: str


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    user_type: str
    phone: str
    location: str
    business_name: str | None = None
    created_at: str


class SignUpResponse(SuccessResponse):
    user: UserResponse
    user_id: str
    access_token: str | None = None


class SignInResponse(SuccessResponse):
    user: UserResponse
    access_token: str


class SessionResponse(SuccessResponse):
    user: UserResponse
