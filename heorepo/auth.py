"""Admin authentication."""

import hmac
import logging
from typing import Protocol

LOGGER = logging.getLogger(__name__)


class Authenticator(Protocol):
    def verify(self, credential: str) -> bool:
        ...


class SharedSecretAuthenticator:
    """평문 공유 비밀번호 하나와 비교 (해시, 횟수 제한, 세션 만료 없음)"""

    def __init__(self, secret: str):
        self.secret = secret

    def verify(self, credential: str) -> bool:
        if not isinstance(credential, str):
            return False
        ok = hmac.compare_digest(credential.strip().encode("utf-8"), self.secret.encode("utf-8"))
        if not ok:
            LOGGER.info("admin login rejected")
        return ok
