import bcrypt


class _BcryptContext:
    def hash(self, password: str) -> str:
        if not isinstance(password, str):
            raise TypeError("password must be a string")
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str | None) -> bool:
        if not isinstance(password, str) or not isinstance(hashed, str):
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False


pwd_context = _BcryptContext()
