from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel
from app.core.config import settings

http_bearer = HTTPBearer(auto_error=False)

class Principal(BaseModel):
    user_id: int
    roles: list[str] = []
    scopes: list[str] = []

def _decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG], audience=settings.REQUIRED_AUDIENCE)
        return payload
    except JWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")

async def get_principal(creds: HTTPAuthorizationCredentials | None = Depends(http_bearer)) -> Principal:
    # In local, allow missing token and act as a local admin
    if creds is None and settings.ENV == "local":
        return Principal(user_id=0, roles=["admin"], scopes=["*"])
    if creds is None:
        raise HTTPException(status_code=401, detail="Missing token")

    data = _decode_token(creds.credentials)
    try:
        user_id = int(data.get("sub") or data.get("user_id"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Token has no numeric subject")
    roles = data.get("roles", [])
    scopes = data.get("scopes", [])
    return Principal(user_id=user_id, roles=roles, scopes=scopes)

def require_scopes(*needed: str):
    def dep(principal: Principal = Depends(get_principal)) -> Principal:
        if "*" in principal.scopes:
            return principal
        if not set(needed).issubset(set(principal.scopes)):
            raise HTTPException(status_code=403, detail="Insufficient scopes")
        return principal
    return dep

def require_api_key(kind: str):
    """Static key check for kiosks ("external") and back-office callers ("internal").

    A key that is not configured disables the check.
    """
    def dep(x_api_key: str | None = Header(default=None)):
        expected = settings.EXTERNAL_API_KEY if kind == "external" else settings.INTERNAL_API_KEY
        if expected and x_api_key != expected:
            raise HTTPException(status_code=401, detail="Invalid API key")
    return dep
