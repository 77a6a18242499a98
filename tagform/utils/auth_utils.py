import uuid
from datetime import datetime, timedelta
from passlib.context import CryptContext
from jose import JWTError, jwt
from tagform.config.env_config import settings

pwd_context = CryptContext(schemes=["bcrypt"], bcrypt__rounds=settings.BCRYPT_ROUNDS, deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)

def generate_jwt(data: dict, expire_minutes: int, secret_key: str, algorithm: str):
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=expire_minutes)

    # jti lets a single token be revoked on logout
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})

    encoded_jwt = jwt.encode(to_encode, secret_key, algorithm=algorithm)
    return encoded_jwt


def verify_jwt(token: str, secret_key: str, algorithm: str):
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
        return payload
    except JWTError:
        return None


def extract_bearer_token(header_value: str | None) -> str | None:
    if not header_value:
        return None
    if header_value.startswith("Bearer "):
        return header_value[7:].strip() or None
    return header_value.strip() or None
