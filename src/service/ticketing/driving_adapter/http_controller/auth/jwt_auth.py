"""
Customer identity from JWT

Tokens are issued by the account service; this service only verifies them
and reads the `user_id` claim.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = 7

    def create_jwt_token(self, *, customer_id: int, email: Optional[str] = None) -> str:
        payload: Dict[str, Any] = {
            'sub': str(customer_id),
            'exp': datetime.now(timezone.utc) + timedelta(days=self.token_expire_days),
            'iat': datetime.now(timezone.utc),
            'user_id': customer_id,
        }
        if email:
            payload['email'] = email

        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def get_customer_id_from_jwt(self, token: Optional[str]) -> Optional[int]:
        """None when no token was sent; the use case decides that is unauthenticated"""
        if not token:
            return None

        user_id = self.decode_jwt_token(token).get('user_id')
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise AuthenticationError('Invalid token')
        return user_id
