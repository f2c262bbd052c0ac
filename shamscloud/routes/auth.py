from fastapi import APIRouter, Depends, Request
from ..api_models import ConfirmReset, Login, Message, RegisteredUser, ResetPassword, Signup, UserOut
from ..middleware import auth_service, require_auth
from ..records import UserRecord
from ..services import AuthService

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

RESET_MESSAGE = "If an account with this email exists, a password reset link has been sent"


@router.post("/register", status_code=201, response_model=RegisteredUser)
async def register(request: Request, signup: Signup, auth: AuthService = Depends(auth_service)):
    user, token, session_token = await auth.register(signup.name, signup.email, signup.password)
    request.session["token"] = session_token
    return RegisteredUser(
        **UserOut.model_validate(user).model_dump(),
        verification_url=f"/verify-email?token={token.token}",
        message="Please verify your email to complete registration",
    )

@router.post("/login", response_model=UserOut)
async def login(request: Request, login: Login, auth: AuthService = Depends(auth_service)):
    user, session_token = await auth.login(login.email, login.password)
    request.session["token"] = session_token
    return UserOut.model_validate(user)

@router.post("/logout", response_model=Message)
async def logout(request: Request, auth: AuthService = Depends(auth_service)):
    auth.logout(request.session.get("token"))
    request.session.clear()
    return Message(message="Logged out successfully")

@router.get("/me", response_model=UserOut)
async def me(user: UserRecord = Depends(require_auth)):
    return UserOut.model_validate(user)

@router.post("/reset-password", response_model=Message)
async def reset_password(body: ResetPassword, auth: AuthService = Depends(auth_service)):
    await auth.reset_password(body.email)
    return Message(message=RESET_MESSAGE)

@router.post("/reset-password/confirm", response_model=Message)
async def confirm_reset(body: ConfirmReset, auth: AuthService = Depends(auth_service)):
    await auth.confirm_password_reset(body.token, body.password)
    return Message(message="Password has been reset")

@router.get("/verify-email")
async def verify_email(request: Request, token: str, auth: AuthService = Depends(auth_service)):
    user, session_token = await auth.verify_email(token)
    request.session["token"] = session_token
    return {
        "message": "Email verified successfully",
        "user": UserOut.model_validate(user).model_dump(by_alias=True, mode="json"),
    }
