import random
import string
from datetime import datetime, timezone, timedelta
from typing import Optional

from jose import jwt, JWTError

from config import settings


# ── Vérification d'identité ───────────────────────────────────────────────────
class IdentityVerifier:
    """
    Valide un jeton porteur émis par le fournisseur d'identité et en extrait
    l'identité. Retourne None si le jeton est rejeté (signature, expiration,
    audience, émetteur ou claim email manquant).
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience
        self.issuer = issuer

    def verify(self, token: str) -> Optional[dict]:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError:
            return None

        email = payload.get("email")
        if not isinstance(email, str) or not email:
            return None
        return {"email": email.lower(), "uid": payload.get("sub")}


def get_identity_verifier() -> IdentityVerifier:
    return IdentityVerifier(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )


# ── Émission (seed / tests) ───────────────────────────────────────────────────
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    if settings.JWT_AUDIENCE:
        to_encode.setdefault("aud", settings.JWT_AUDIENCE)
    if settings.JWT_ISSUER:
        to_encode.setdefault("iss", settings.JWT_ISSUER)
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# ── Tracking code ─────────────────────────────────────────────────────────────
def generate_tracking_id() -> str:
    """Génère un code lisible humain : PCL-AB12-CD34"""
    chars = string.ascii_uppercase + string.digits
    code = "".join(random.choices(chars, k=8))
    return f"PCL-{code[:4]}-{code[4:]}"
