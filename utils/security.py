"""
安全工具
密码哈希与API密钥生成
"""
# 标准库导包
import secrets

# 第三方库导包
from passlib.context import CryptContext

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """无法识别的哈希（例如未设置密码）视为不匹配"""
    if not password_hash or _pwd_context.identify(password_hash) is None:
        return False
    return _pwd_context.verify(password, password_hash)


def generate_api_key() -> str:
    """生成32位十六进制的API密钥"""
    return secrets.token_hex(16)
